import logging

import pytest

from customer_sync.browser.dashboard import DashboardBrowser


class FakeBody:
    def __init__(self, text):
        self.text = text

    async def inner_text(self):
        return self.text


class FakePage:
    url = "https://merchants.ubereats.com/manager/home/S1/analytics/customers/"

    def __init__(self, text):
        self.body = FakeBody(text)

    def locator(self, selector):
        assert selector == "body"
        return self.body


def browser_showing(text):
    browser = DashboardBrowser()
    browser._page = FakePage(text)
    return browser


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["注文者グループの概要\n新着 12", "注文者分析データ", "Customer trends"])
async def test_has_customer_data_finds_markers(text):
    assert await browser_showing(text).has_customer_data() is True


@pytest.mark.asyncio
async def test_has_customer_data_warns_on_other_pages(caplog):
    with caplog.at_level(logging.WARNING):
        assert await browser_showing("ホーム 売上").has_customer_data() is False
    assert "without customer analytics content" in caplog.text
