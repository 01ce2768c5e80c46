"""
================================================================================
Home Page Object
================================================================================

Home screen operations over the `home` locator file
(`config/locators/home.yaml`).

================================================================================
"""

from __future__ import annotations

import re

import allure
from playwright.sync_api import expect

from locatorsuite.ui_testing.framework.page_context import PageContext


class HomePage:
    """Home page operations bound to a PageContext."""

    PAGE_NAME = "home"
    URL_PATH = "/"

    def __init__(self, ctx: PageContext):
        self.ctx = ctx

    @allure.step("Open home page")
    def open(self) -> "HomePage":
        self.ctx.visit(self.URL_PATH)
        return self

    @allure.step("Verify home page is displayed")
    def verify_home_page_displayed(self) -> "HomePage":
        self.ctx.wait_for("header")
        self.ctx.wait_for("mainContent")
        return self

    def click_logo(self) -> "HomePage":
        self.ctx.click("logo")
        return self

    @allure.step("Search for: {search_term}")
    def search(self, search_term: str) -> "HomePage":
        self.ctx.type("searchInput", search_term)
        self.ctx.click("searchButton")
        return self

    def open_user_menu(self) -> "HomePage":
        self.ctx.click("userMenu")
        return self

    @allure.step("Logout")
    def logout(self) -> "HomePage":
        self.open_user_menu()
        self.ctx.click("logoutButton")
        expect(self.ctx.page).to_have_url(
            re.compile(r"/login"), timeout=self.ctx.timeout_ms
        )
        return self

    def go_to_profile(self) -> "HomePage":
        self.open_user_menu()
        self.ctx.click("profileLink")
        return self

    def go_to_settings(self) -> "HomePage":
        self.open_user_menu()
        self.ctx.click("settingsLink")
        return self

    def open_notifications(self) -> "HomePage":
        self.ctx.click("notificationBell")
        return self

    def get_notification_count(self) -> str:
        return self.ctx.get_text("notificationCount").strip()

    def verify_user_logged_in(self) -> "HomePage":
        self.ctx.wait_for("userMenu")
        return self

    def verify_featured_items_displayed(self) -> "HomePage":
        self.ctx.wait_for("featuredItems")
        return self

    def verify_hero_section_displayed(self) -> "HomePage":
        self.ctx.wait_for("heroSection")
        return self

    def verify_footer_displayed(self) -> "HomePage":
        self.ctx.scroll_to("footer")
        self.ctx.wait_for("footer")
        return self

    def get_copyright_text(self) -> str:
        return self.ctx.get_text("copyrightText")
