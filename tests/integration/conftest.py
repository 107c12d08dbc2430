"""
Pytest configuration for integration tests

These drive a real Chromium against pages served through request routing.
Set FORMBOT_INTEGRATION=true to run them.
"""

import os

import pytest
import pytest_asyncio

BASE_URL = "https://forms.test"


def pytest_collection_modifyitems(config, items):
    if os.getenv("FORMBOT_INTEGRATION", "false").lower() == "true":
        return
    skip = pytest.mark.skip(reason="set FORMBOT_INTEGRATION=true to run browser tests")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session")
def base_url():
    return BASE_URL


@pytest_asyncio.fixture
async def browser_page():
    """Provide a browser page for tests"""
    from playwright.async_api import async_playwright

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        page = await browser.new_page()
        yield page
        await browser.close()


@pytest.fixture
def serve():
    """Register HTML documents by path on a page: await serve(page, {"/": html})"""

    async def _serve(page, documents):
        async def handler(route):
            path = "/" + route.request.url.split(BASE_URL, 1)[1].lstrip("/").split("?")[0]
            body = documents.get(path)
            if body is None:
                await route.fulfill(status=404, body="not found")
            else:
                await route.fulfill(status=200, content_type="text/html", body=body)

        await page.route(f"{BASE_URL}/**", handler)

    return _serve
