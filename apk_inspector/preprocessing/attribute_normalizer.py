"""
Normalización de valores de atributos del manifest

Cuando el decodificador no puede resolver una referencia de recurso, el
valor llega en forma cruda, p. ej. ``"(type 0x10) 0x12927c70"``. Aquí se
convierte el último valor hexadecimal a su representación decimal.
"""

import string

RAW_TYPE_MARKER = "(type 0x"
HEX_PREFIX = "0x"
MAX_UINT32 = 0xFFFFFFFF


def normalize_value(value: str) -> str:
    """
    Convierte un valor crudo ``(type 0xTT) 0xVVVVVVVV`` a decimal

    Args:
        value: Valor del atributo tal como lo entrega el decodificador

    Returns:
        Cadena decimal, o el valor original si no aplica o no se puede parsear
    """
    if RAW_TYPE_MARKER not in value or HEX_PREFIX not in value:
        return value

    hex_digits = value[value.rfind(HEX_PREFIX) + len(HEX_PREFIX):].strip()
    # int() aceptaría signos y guiones bajos
    if not hex_digits or any(c not in string.hexdigits for c in hex_digits):
        return value

    number = int(hex_digits, 16)
    if number > MAX_UINT32:
        return value

    return str(number)
