import keyword
import re
import unicodedata

__all__ = (
    'sanitize_identifier',
    'sanitize_parameter_field_name',
    'to_snake_case',
    'to_constant_name',
)


def capitalize(input_string):
    if not input_string:
        return ''
    return input_string[0].upper() + input_string[1:]


def remove_accents(input_str):
    nfkd_form = unicodedata.normalize('NFKD', input_str)
    return ''.join(c for c in nfkd_form if not unicodedata.combining(c))


def sanitize_name_python_keywords(name: str) -> str:
    if keyword.iskeyword(name) or keyword.issoftkeyword(name):
        return f'{name}_'
    return name


def to_snake_case(name: str) -> str:
    """Convert a PascalCase, camelCase or delimited name to snake_case.

    Runs of capitals are kept together so acronyms read naturally:
    ``SSEKMSKeyId`` becomes ``ssekms_key_id`` and ``HTTPStatus`` becomes
    ``http_status``.
    """
    name = re.sub(r'[^A-Za-z0-9]+', '_', remove_accents(name))
    name = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', name)
    name = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', name)
    return re.sub(r'_+', '_', name).strip('_').lower()


def sanitize_parameter_field_name(name: str) -> str:
    """Sanitize member names to be valid snake_case Python identifiers.

    - Convert to snake_case
    - Remove other invalid characters
    - Ensure it doesn't start with a digit
    - Append an underscore to Python keywords
    """
    if not name:
        raise ValueError('Name cannot be empty')

    sanitized = to_snake_case(name)
    sanitized = re.sub(r'[^A-Za-z0-9_]', '', sanitized)

    if sanitized and sanitized[0].isdigit():
        sanitized = '_' + sanitized
    if not sanitized:
        raise ValueError(f'Name {name!r} has no valid identifier characters')
    return sanitize_name_python_keywords(sanitized)


def sanitize_identifier(name: str) -> str:
    """Convert a string into a valid Python class name.

    - Replace spaces and hyphens with underscores
    - Remove other invalid characters
    - Ensure it doesn't start with a digit
    - Convert to PascalCase for class names
    """
    if not name:
        return 'UnnamedType'

    parts = re.sub(r'[^A-Za-z0-9]+', '_', remove_accents(name)).split('_')

    if len(parts) == 1:
        sanitized = capitalize(parts[0])
    else:
        sanitized = ''.join(capitalize(part) for part in parts if part)

    sanitized = re.sub(r'[^A-Za-z0-9_]', '', sanitized)

    if sanitized and sanitized[0].isdigit():
        sanitized = '_' + sanitized

    return sanitized or 'UnnamedType'


def to_constant_name(value: str) -> str:
    """Convert an enum literal into an UPPER_SNAKE_CASE constant name."""
    constant = re.sub(r'[^A-Za-z0-9]+', '_', remove_accents(value))
    if constant.upper() != constant:
        constant = to_snake_case(constant)
    constant = constant.strip('_').upper()
    if not constant:
        return 'EMPTY'
    if constant[0].isdigit():
        constant = '_' + constant
    return sanitize_name_python_keywords(constant)
