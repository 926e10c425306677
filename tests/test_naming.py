"""Tests for the naming module."""

from mcp_rest_gen.naming import (
    camel_to_snake,
    find_collisions,
    parameter_type_name,
    resolve_symbols,
    to_snake_symbol,
    to_type_symbol,
)


class TestSnakeSymbols:
    """Test operationId -> snake_case identifier conversion."""

    def test_pascal_case(self):
        assert camel_to_snake("ListBooks") == "list_books"

    def test_camel_case(self):
        assert camel_to_snake("listBooks") == "list_books"

    def test_acronym(self):
        assert camel_to_snake("GetHTTPStatus") == "get_http_status"

    def test_dashes_and_dots(self):
        assert to_snake_symbol("books.get-by-id") == "books_get_by_id"

    def test_leading_digit(self):
        assert to_snake_symbol("2faVerify") == "op_2fa_verify"

    def test_only_punctuation(self):
        assert to_snake_symbol("--") == "op"

    def test_valid_python_identifier(self):
        """Snake symbols must be valid Python identifiers."""
        for op_id in ("ListBooks", "get /books", "x.y.z", "9lives", "Ünïcode"):
            assert to_snake_symbol(op_id).isidentifier(), op_id


class TestTypeSymbols:
    """Test the argument type naming convention."""

    def test_params_type(self):
        assert parameter_type_name("ListBooks", False) == "ListBooksParams"

    def test_body_type(self):
        assert parameter_type_name("AddBook", True) == "AddBookJSONRequestBody"

    def test_identifier_kept_verbatim(self):
        assert to_type_symbol("listBooks") == "listBooks"

    def test_non_identifier_pascal_cased(self):
        assert to_type_symbol("list-books") == "ListBooks"

    def test_non_identifier_leading_digit(self):
        assert to_type_symbol("2fa-verify") == "Op2faVerify"


class TestResolveSymbols:
    """Test per-operation symbol resolution."""

    def test_params_mode(self, make_op):
        symbols = resolve_symbols(make_op("ListBooks"))
        assert symbols.tool_name == "ListBooks"
        assert symbols.handler_name == "handle_list_books"
        assert symbols.client_method == "list_books_with_response"
        assert symbols.argument_type == "ListBooksParams"
        assert symbols.pass_by_value is False

    def test_body_mode(self, make_op):
        symbols = resolve_symbols(make_op("AddBook", has_request_body=True))
        assert symbols.argument_type == "AddBookJSONRequestBody"
        assert symbols.pass_by_value is True

    def test_stable(self, make_op):
        """Resolving the same operation twice yields identical names."""
        op = make_op("getBookById")
        assert resolve_symbols(op) == resolve_symbols(op)


class TestFindCollisions:
    """Test detection of operations sharing a generated symbol."""

    def test_no_collisions(self, make_op):
        ops = [make_op("ListBooks"), make_op("AddBook", has_request_body=True)]
        assert find_collisions(ops) == {}

    def test_case_only_difference_collides(self, make_op):
        ops = [make_op("ListBooks"), make_op("listBooks")]
        collisions = find_collisions(ops)
        assert collisions["handle_list_books"] == ["ListBooks", "listBooks"]
        assert collisions["list_books_with_response"] == ["ListBooks", "listBooks"]
        # argument types keep the original case and do not clash
        assert "ListBooksParams" not in collisions

    def test_punctuation_difference_collides(self, make_op):
        ops = [make_op("list-books"), make_op("list_books")]
        assert "handle_list_books" in find_collisions(ops)
