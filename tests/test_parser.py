"""Tests for value-override and confirmation message parsing."""

from formbot_core.form_fill import format_confirmation, parse_confirmation, parse_form_pairs


class TestParseFormPairs:

    def test_comma_separated(self):
        pairs = parse_form_pairs("firstName=Santosh, email=santosh@gmail.com")
        assert pairs == {"firstName": "Santosh", "email": "santosh@gmail.com"}

    def test_semicolons_and_newlines(self):
        pairs = parse_form_pairs("name=Santosh; mobileNo=9988776655\ndescription=Hi there")
        assert pairs == {"name": "Santosh", "mobileNo": "9988776655", "description": "Hi there"}

    def test_json_object(self):
        assert parse_form_pairs('{"name": "Santosh", "age": 30}') == {"name": "Santosh", "age": "30"}

    def test_json_instruction_wrapper(self):
        pairs = parse_form_pairs('{"instruction": "email=a@b.c, name=Ann"}')
        assert pairs == {"email": "a@b.c", "name": "Ann"}

    def test_empty(self):
        assert parse_form_pairs(None) == {}
        assert parse_form_pairs("no pairs here") == {}


class TestConfirmationMessages:

    def test_format_one_line_per_field(self):
        message = format_confirmation({"Name": "Santosh", "MobileNo": "9988776655"})
        assert message == "Name: Santosh\nMobileNo: 9988776655"

    def test_parse_restores_fields(self):
        message = format_confirmation({"Name": "Santosh", "Email": "santosh@gmail.com"})
        assert parse_confirmation(message) == {"Name": "Santosh", "Email": "santosh@gmail.com"}

    def test_parse_splits_on_first_colon(self):
        assert parse_confirmation("Time: 10:30") == {"Time": "10:30"}

    def test_parse_ignores_lines_without_colon(self):
        message = "Thanks for signing up!\nFirstName: Santosh"
        assert parse_confirmation(message) == {"FirstName": "Santosh"}

    def test_parse_empty(self):
        assert parse_confirmation(None) == {}
        assert parse_confirmation("") == {}
