"""
Module for formatting product prices using Babel.

"""
import decimal
import logging
from typing import List, Optional, Union

from babel import Locale, UnknownLocaleError, numbers

CURRENCY_MAP: dict[str, str] = {
    'US': 'USD',
    'GB': 'GBP',
    'DE': 'EUR',
    'FR': 'EUR',
    'BE': 'EUR',
    'IT': 'EUR',
    'ES': 'EUR',
    'JP': 'JPY',
    'CA': 'CAD',
    'AU': 'AUD',
    'IN': 'INR',
    'BR': 'BRL',
    'CN': 'CNY',
    'KR': 'KRW',
    'DK': 'DKK',
    'SE': 'SEK',
    'NO': 'NOK',
    'FI': 'EUR',
    'HU': 'HUF',
    'MX': 'MXN',
    'NL': 'EUR',
}

LOCALE_MAP: List[str] = [
    'en_US',
    'en_GB',
    'en_AU',
    'en_CA',
    'en_IN',
    'de_DE',
    'es_ES',
    'es_MX',
    'fi_FI',
    'fr_BE',
    'fr_FR',
    'hu_HU',
    'it_IT',
    'ja_JP',
    'ko_KR',
    'da_DK',
    'nb_NO',
    'nl_NL',
    'pt_BR',
    'sv_SE',
    'zh_CN',
]

PRICE_FORMAT = '#,##0.00'

Number = Union[decimal.Decimal, float, int]


def get_currency_from_locale(locale: str) -> str:
    """
    Retrieve the default currency code based on the locale's territory.

    Args:
        locale (str): Locale string, e.g. 'fr_FR'.

    Returns:
        str: Currency code such as 'EUR'. Defaults to 'USD' if the territory is unknown.
    """
    parts = locale.split('_')
    if len(parts) < 2:
        return 'USD'
    return CURRENCY_MAP.get(parts[1], 'USD')


def format_decimal(value: Number, locale: str) -> str:
    """
    Format a number with two fractional digits according to the locale conventions.

    Args:
        value: The numeric value to be formatted.
        locale (str): Locale string, e.g. 'en_US'.

    Returns:
        str: The formatted decimal string.
    """
    try:
        return numbers.format_decimal(value, format=PRICE_FORMAT, locale=Locale.parse(locale))
    except (ValueError, TypeError, UnknownLocaleError) as ex:
        logging.debug(f'Error formatting "{value}" for locale "{locale}": {ex}')
        return f'{decimal.Decimal(str(value)):.2f}'


def format_price(value: Number, locale: str, currency: Optional[str] = None) -> str:
    """
    Format a price as a currency string with at least two fractional digits.

    The stored value keeps its full precision; only the display is rounded.

    Args:
        value: The price.
        locale (str): Locale string, e.g. 'fr_FR'.
        currency (str, optional): Currency code. Derived from the locale's territory when empty.

    Returns:
        str: The formatted currency string.
    """
    currency = currency or get_currency_from_locale(locale)
    try:
        return numbers.format_currency(
            value,
            currency=currency,
            locale=Locale.parse(locale),
            currency_digits=False,
            format=None,
            decimal_quantization=True,
        )
    except (ValueError, TypeError, UnknownLocaleError, numbers.UnknownCurrencyError) as ex:
        logging.debug(f'Error formatting currency "{currency}" for locale "{locale}": {ex}')
        return f'{decimal.Decimal(str(value)):.2f} {currency}'
