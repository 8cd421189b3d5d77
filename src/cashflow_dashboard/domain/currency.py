CURRENCY_SYMBOLS = {
    "AED": "د.إ",
    "ARS": "$",
    "AUD": "$",
    "BRL": "R$",
    "CAD": "$",
    "CHF": "CHF",
    "CLP": "$",
    "CNY": "¥",
    "COP": "$",
    "CZK": "Kč",
    "DKK": "kr.",
    "EUR": "€",
    "GBP": "£",
    "HKD": "$",
    "HUF": "Ft",
    "IDR": "Rp",
    "ILS": "₪",
    "INR": "₹",
    "JPY": "¥",
    "KRW": "₩",
    "MXN": "$",
    "MYR": "RM",
    "NGN": "₦",
    "NOK": "kr",
    "NZD": "$",
    "PHP": "₱",
    "PKR": "₨",
    "PLN": "zł",
    "RON": "Lei",
    "RUB": "₽",
    "SAR": "ر.س",
    "SEK": "kr",
    "SGD": "$",
    "THB": "฿",
    "TRY": "₺",
    "TWD": "$",
    "UAH": "₴",
    "USD": "$",
    "VND": "₫",
    "ZAR": "R",
}


def currency_symbol(code: str | None) -> str:
    normalized = (code or "").strip().upper()
    return CURRENCY_SYMBOLS.get(normalized, normalized)
