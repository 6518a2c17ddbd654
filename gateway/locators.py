#!/usr/bin/env python3

"""Fallback Locators for the Gateway Pages.

Each logical element lists its candidates most specific first: stable ids
and autocomplete hints, then name/placeholder matches, then broad XPath
text matches for both English and Turkish labels. The first candidate that
matches anything wins.
"""

from selenium.webdriver.common.by import By

from browser.selenium_utils import FallbackLocator

CSS = By.CSS_SELECTOR
XPATH = By.XPATH

# --- General Page Elements ---
PAGE_BODY = FallbackLocator.css("page body", "body")

# --- Login Page ---
USERNAME_INPUT = FallbackLocator.of(
    "username field",
    [
        (CSS, "input#username"),
        (CSS, "input#email"),
        (CSS, "input[autocomplete='username']"),
        (CSS, "input[type='email']"),
        (XPATH, "//input[contains(@name, 'username') or contains(@name, 'email') or contains(@name, 'kullanici')]"),
        (XPATH, "//input[contains(@placeholder, 'kullanıcı') or contains(@placeholder, 'email')]"),
    ],
)
PASSWORD_INPUT = FallbackLocator.of(
    "password field",
    [
        (CSS, "input#password"),
        (CSS, "input[type='password']"),
        (XPATH, "//input[contains(@name, 'password') or contains(@name, 'sifre') or contains(@id, 'sifre')]"),
    ],
)
LOGIN_BUTTON = FallbackLocator.of(
    "login button",
    [
        (CSS, "button[type='submit']"),
        (CSS, "input[type='submit']"),
        (
            XPATH,
            "//button[contains(text(), 'Giriş') or contains(text(), 'Login') or contains(@class, 'login')]",
        ),
    ],
)
LOGIN_FORM = FallbackLocator.of(
    "login form",
    [
        (CSS, "form#login"),
        (XPATH, "//form[contains(@action, 'login') or contains(@class, 'login') or contains(@action, 'giris')]"),
        (CSS, "form"),
    ],
)
LOGIN_ERROR_MESSAGE = FallbackLocator.of(
    "login error message",
    [
        (CSS, ".alert-danger"),
        (CSS, "[role='alert']"),
        (XPATH, "//*[contains(@class, 'error') or contains(@class, 'hata')]"),
        (
            XPATH,
            "//*[contains(text(), 'geçersiz') or contains(text(), 'invalid') or contains(text(), 'hatalı')"
            " or contains(text(), 'incorrect')]",
        ),
    ],
)

# --- Payment Page ---
CARD_NUMBER_INPUT = FallbackLocator.of(
    "card number field",
    [
        (CSS, "input[autocomplete='cc-number']"),
        (CSS, "input#card_number"),
        (CSS, "input[name='cc_number']"),
        (XPATH, "//input[contains(@name, 'card') or contains(@id, 'card') or contains(@placeholder, 'Card')]"),
        (XPATH, "//input[contains(@placeholder, 'kart')]"),
    ],
)
CARD_HOLDER_INPUT = FallbackLocator.of(
    "card holder field",
    [
        (CSS, "input[autocomplete='cc-name']"),
        (CSS, "input#cc_owner"),
        (XPATH, "//input[contains(@name, 'holder') or contains(@id, 'holder') or contains(@name, 'owner')]"),
    ],
)
EXPIRY_MONTH_INPUT = FallbackLocator.of(
    "expiry month field",
    [
        (CSS, "input[autocomplete='cc-exp-month']"),
        (CSS, "select[name*='month']"),
        (XPATH, "//input[contains(@name, 'month') or contains(@id, 'month') or contains(@placeholder, 'MM')]"),
    ],
)
EXPIRY_YEAR_INPUT = FallbackLocator.of(
    "expiry year field",
    [
        (CSS, "input[autocomplete='cc-exp-year']"),
        (CSS, "select[name*='year']"),
        (XPATH, "//input[contains(@name, 'year') or contains(@id, 'year') or contains(@placeholder, 'YY')]"),
    ],
)
CVV_INPUT = FallbackLocator.of(
    "cvv field",
    [
        (CSS, "input[autocomplete='cc-csc']"),
        (CSS, "input#cvv"),
        (XPATH, "//input[contains(@name, 'cvv') or contains(@name, 'cvc') or contains(@id, 'cvv')]"),
        (XPATH, "//input[contains(@name, 'security') or contains(@placeholder, 'CVV')]"),
    ],
)
AMOUNT_INPUT = FallbackLocator.of(
    "amount field",
    [
        (CSS, "input#amount"),
        (XPATH, "//input[contains(@name, 'amount') or contains(@name, 'tutar') or contains(@id, 'tutar')]"),
    ],
)
INSTALLMENT_SELECT = FallbackLocator.of(
    "installment selector",
    [
        (CSS, "select#installment"),
        (XPATH, "//select[contains(@name, 'taksit') or contains(@name, 'installment')]"),
        (XPATH, "//input[@type='radio'][contains(@name, 'taksit') or contains(@name, 'installment')]"),
    ],
)
PAY_BUTTON = FallbackLocator.of(
    "pay button",
    [
        (CSS, "button#pay"),
        (CSS, "button[type='submit']"),
        (XPATH, "//button[contains(text(), 'Öde') or contains(text(), 'Pay') or contains(@class, 'pay')]"),
        (XPATH, "//input[@type='submit'][contains(@value, 'Öde') or contains(@value, 'Pay')]"),
    ],
)
PAYMENT_ERROR_MESSAGE = FallbackLocator.of(
    "payment error message",
    [
        (CSS, ".alert-danger"),
        (CSS, "[role='alert']"),
        (XPATH, "//*[contains(@class, 'error') or contains(@class, 'hata')]"),
    ],
)

LOGIN_FORM_FIELDS: tuple[FallbackLocator, ...] = (USERNAME_INPUT, PASSWORD_INPUT, LOGIN_BUTTON)
PAYMENT_FORM_FIELDS: tuple[FallbackLocator, ...] = (CARD_NUMBER_INPUT, EXPIRY_MONTH_INPUT, CVV_INPUT, PAY_BUTTON)
