"""Test utility functions."""

import pytest

from shapesmith.codegen.utils import (
    sanitize_identifier,
    sanitize_parameter_field_name,
    to_constant_name,
    to_snake_case,
)


class TestToSnakeCase:
    """Test to_snake_case function."""

    @pytest.mark.parametrize(
        'name,expected',
        [
            ('StringMember', 'string_member'),
            ('fooBar', 'foo_bar'),
            ('SSEKMSKeyId', 'ssekms_key_id'),
            ('HTTPStatus', 'http_status'),
            ('foo-bar baz', 'foo_bar_baz'),
            ('Value2Go', 'value2_go'),
        ],
    )
    def test_conversions(self, name, expected):
        assert to_snake_case(name) == expected


class TestSanitizeParameterFieldName:
    """Test sanitize_parameter_field_name function."""

    def test_keywords_get_suffix(self):
        assert sanitize_parameter_field_name('Class') == 'class_'
        assert sanitize_parameter_field_name('match') == 'match_'

    def test_leading_digit(self):
        assert sanitize_parameter_field_name('3dModel') == '_3d_model'

    def test_empty(self):
        with pytest.raises(ValueError):
            sanitize_parameter_field_name('')

    def test_no_identifier_characters(self):
        with pytest.raises(ValueError, match='no valid identifier characters'):
            sanitize_parameter_field_name('---')


class TestSanitizeIdentifier:
    """Test sanitize_identifier function."""

    def test_basic(self):
        assert sanitize_identifier('SimpleStruct') == 'SimpleStruct'
        assert sanitize_identifier('simple-struct') == 'SimpleStruct'
        assert sanitize_identifier('my service') == 'MyService'

    def test_accents_and_digits(self):
        assert sanitize_identifier('café') == 'Cafe'
        assert sanitize_identifier('1password') == '_1password'

    def test_empty(self):
        assert sanitize_identifier('') == 'UnnamedType'
        assert sanitize_identifier('***') == 'UnnamedType'


class TestToConstantName:
    """Test to_constant_name function."""

    @pytest.mark.parametrize(
        'value,expected',
        [
            ('RED', 'RED'),
            ('green', 'GREEN'),
            ('light-blue', 'LIGHT_BLUE'),
            ('lightBlue', 'LIGHT_BLUE'),
            ('t2.micro', 'T2_MICRO'),
            ('1x', '_1X'),
            ('', 'EMPTY'),
            ('--', 'EMPTY'),
        ],
    )
    def test_conversions(self, value, expected):
        assert to_constant_name(value) == expected
