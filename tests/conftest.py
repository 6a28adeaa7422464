from __future__ import annotations

from pathlib import Path

import pytest

from site_answers.core.config import AppConfig, AppPaths, CrawlSettings
from site_answers.core.models import Document


@pytest.fixture()
def crawl_settings() -> CrawlSettings:
    return CrawlSettings(origin="https://example.com", max_pages=50, concurrency=2, rate_interval_seconds=0.01)


@pytest.fixture()
def app_config(tmp_path: Path, crawl_settings: CrawlSettings) -> AppConfig:
    return AppConfig(paths=AppPaths.under(tmp_path), crawl=crawl_settings)


@pytest.fixture()
def site_documents() -> list[Document]:
    return [
        Document(
            id=0,
            url="https://example.com/events",
            title="CSI Events",
            section="Events",
            text="CSI hosts events all year. Front desk hours are listed elsewhere.",
        ),
        Document(
            id=1,
            url="https://example.com/front-desk",
            title="Contact",
            section="Visit Us",
            text="Our hours are 9am to 5pm. Stop by any weekday. Call ahead on holidays. Parking is limited.",
        ),
        Document(
            id=2,
            url="https://example.com/finances",
            title="Student Organization Finances",
            section="Funding",
            text="Fund managers approve reimbursement requests within two weeks.",
        ),
    ]
