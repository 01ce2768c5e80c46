"""
================================================================================
Login Page Object
================================================================================

Login screen operations over the `login` locator file
(`config/locators/login.yaml`).

================================================================================
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Optional, Union

import allure
from loguru import logger
from playwright.sync_api import expect

from locatorsuite.api_testing.framework.http_client import ApiClient
from locatorsuite.ui_testing.framework.page_context import PageContext


# Cookie the application reads the bearer token from
AUTH_COOKIE = "auth_token"


class LoginPage:
    """Login page operations bound to a PageContext."""

    PAGE_NAME = "login"
    URL_PATH = "/login"
    API_LOGIN_PATH = "/auth/login"

    def __init__(self, ctx: PageContext):
        self.ctx = ctx

    @allure.step("Open login page")
    def open(self) -> "LoginPage":
        self.ctx.visit(self.URL_PATH)
        return self

    def enter_username(self, username: str) -> "LoginPage":
        self.ctx.type("usernameInput", username)
        return self

    def enter_password(self, password: str) -> "LoginPage":
        self.ctx.type("passwordInput", password, sensitive=True)
        return self

    def click_login_button(self) -> "LoginPage":
        self.ctx.click("loginButton")
        return self

    def check_remember_me(self) -> "LoginPage":
        self.ctx.check("rememberMeCheckbox")
        return self

    def click_forgot_password(self) -> "LoginPage":
        self.ctx.click("forgotPasswordLink")
        return self

    def click_sign_up(self) -> "LoginPage":
        self.ctx.click("signUpLink")
        return self

    def click_google_login(self) -> "LoginPage":
        self.ctx.click("googleLoginBtn")
        return self

    def click_facebook_login(self) -> "LoginPage":
        self.ctx.click("facebookLoginBtn")
        return self

    def login(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        remember_me: bool = False,
    ) -> "LoginPage":
        """
        Fill the form and submit.

        Args:
            username: Defaults to the `UI_USERNAME` env var
            password: Defaults to the `UI_PASSWORD` env var
            remember_me: Tick the remember-me checkbox before submitting
        """
        if username is None:
            username = os.getenv("UI_USERNAME", "demo_user")
        if password is None:
            password = os.getenv("UI_PASSWORD", "demo_password")

        with allure.step(f"Login as {username}"):
            self.enter_username(username)
            self.enter_password(password)
            if remember_me:
                self.check_remember_me()
            return self.click_login_button()

    def login_via_api(
        self,
        api_client: ApiClient,
        username: Optional[str] = None,
        password: Optional[str] = None,
        login_path: str = API_LOGIN_PATH,
    ) -> str:
        """
        Log in through the API and hand the token to the browser.

        The token is stored on `api_client` and set as the `auth_token`
        cookie for the application base URL.

        Raises:
            ClassifiedError: AUTHENTICATION_ERROR when the API rejects the login
        """
        username = username if username is not None else os.getenv("UI_USERNAME", "demo_user")
        password = password if password is not None else os.getenv("UI_PASSWORD", "demo_password")

        with allure.step(f"Login via API as {username}"):
            token = api_client.get_auth_token(
                login_path, {"username": username, "password": password}
            )
            api_client.store_auth_token(token)
            self.ctx.page.context.add_cookies(
                [{"name": AUTH_COOKIE, "value": token, "url": self.ctx.base_url or self.ctx.page.url}]
            )
        return token

    def login_once(
        self,
        state_path: Union[str, Path],
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> "LoginPage":
        """
        Log in through the UI the first time, reuse the saved session after.

        The first call saves the context's storage state to `state_path`;
        later calls copy its cookies into the current context instead of
        logging in again. Fresh contexts can also start from the file with
        `BrowserManager.new_context(storage_state=state_path)`.
        """
        state_path = Path(state_path)
        context = self.ctx.page.context
        if state_path.is_file():
            with open(state_path, "r", encoding="utf-8") as f:
                state = json.load(f)
            context.add_cookies(state.get("cookies", []))
            logger.debug(f"Session restored from {state_path}")
            return self

        self.open().login(username, password).wait_for_login_complete()
        state_path.parent.mkdir(parents=True, exist_ok=True)
        context.storage_state(path=str(state_path))
        logger.debug(f"Session saved to {state_path}")
        return self

    def get_error_message(self) -> str:
        return self.ctx.get_text("errorMessage")

    @allure.step("Verify error message: {expected_message}")
    def verify_error_message(self, expected_message: str) -> "LoginPage":
        self.ctx.verify_text("errorMessage", expected_message)
        return self

    @allure.step("Verify login form is displayed")
    def verify_login_page_displayed(self) -> "LoginPage":
        for key in ("usernameInput", "passwordInput", "loginButton"):
            self.ctx.wait_for(key)
        return self

    def verify_validation_error(self) -> "LoginPage":
        self.ctx.wait_for("validationError")
        return self

    def wait_for_login_complete(self) -> "LoginPage":
        expect(self.ctx.page).not_to_have_url(
            re.compile(re.escape(self.URL_PATH)), timeout=self.ctx.timeout_ms
        )
        return self

    def verify_login_button_disabled(self) -> "LoginPage":
        self.ctx.verify_disabled("loginButton")
        return self

    def verify_login_button_enabled(self) -> "LoginPage":
        self.ctx.verify_enabled("loginButton")
        return self
