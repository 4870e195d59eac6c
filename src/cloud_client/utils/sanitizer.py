# src/cloud_client/utils/sanitizer.py
"""
Маскирование чувствительных данных в логах.

Токены Keystone, пароли администратора серверов (adminPass), приватные
ключи key pair и прочие секреты не должны попадать в логи.
"""

import re
from typing import Any, Dict


# Чувствительные ключи (case-insensitive, точное совпадение)
SENSITIVE_KEYS = {
    # Токены
    'token', 'auth_token', 'x-auth-token', 'x-subject-token', 'x-service-token',
    'access_token', 'refresh_token',
    # Пароли
    'password', 'passwd', 'adminpass', 'admin_pass', 'admin_password',
    # Секреты и ключи
    'secret', 'client_secret', 'application_credential_secret',
    'private_key', 'api_key',
    # Заголовки
    'authorization', 'cookie', 'set-cookie',
}

# Суффиксы, по которым ключ считается чувствительным (db_password, app_secret)
SENSITIVE_SUFFIXES = ('_password', '_secret', '_token', '-token')

SENSITIVE_PATTERNS = [
    # Bearer tokens
    (re.compile(r'(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)', re.IGNORECASE), r'\1***REDACTED***'),
    # X-Auth-Token: value внутри строк
    (re.compile(r'(x-auth-token[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    # password=value
    (re.compile(r'(password[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
]


def mask_sensitive_data(data: Any, mask: str = "***REDACTED***") -> Any:
    """
    Рекурсивно маскирует чувствительные данные в словарях, списках, строках.

    Args:
        data: Данные для маскирования
        mask: Строка-заменитель

    Returns:
        Копия данных с замаскированными чувствительными полями

    Examples:
        >>> mask_sensitive_data({"X-Auth-Token": "gAAAA", "Accept": "application/json"})
        {'X-Auth-Token': '***REDACTED***', 'Accept': 'application/json'}
    """
    if data is None or isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, str):
        return _mask_string(data, mask)

    if isinstance(data, dict):
        return _mask_dict(data, mask)

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)

    return data


def mask_headers(headers: Dict[str, str], mask: str = "***REDACTED***") -> Dict[str, str]:
    """Маскирует чувствительные HTTP заголовки."""
    return _mask_dict(dict(headers), mask)


def is_sensitive_key(key: Any) -> bool:
    """
    Проверяет, является ли ключ чувствительным.

    Examples:
        >>> is_sensitive_key("adminPass")
        True
        >>> is_sensitive_key("key_name")
        False
    """
    key_lower = str(key).lower()
    return key_lower in SENSITIVE_KEYS or key_lower.endswith(SENSITIVE_SUFFIXES)


def _mask_dict(data: Dict[Any, Any], mask: str) -> Dict[Any, Any]:
    return {
        key: mask if is_sensitive_key(key) else mask_sensitive_data(value, mask)
        for key, value in data.items()
    }


def _mask_string(text: str, mask: str) -> str:
    result = text
    for pattern, replacement in SENSITIVE_PATTERNS:
        result = pattern.sub(replacement.replace('***REDACTED***', mask), result)
    return result
