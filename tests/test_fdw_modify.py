"""
Tests for insert/update/delete on OpenApiFdw.
"""

import pytest

from openapi_fdw.errors import (
    ConfigurationError,
    FdwError,
    OperationNotAllowedError,
    RowIdError,
    TransportError,
)
from openapi_fdw.host.protocol import HttpMethod, Metric
from openapi_fdw.host.types import Cell, Context, Row, TypeOid

BASE = "https://api.example.com"


@pytest.fixture
def table_options():
    return {"endpoint": "/users", "rowid_column": "id"}


@pytest.fixture
def modify(make_fdw, server_options, table_options):
    """An fdw with begin_modify already called, plus its context."""
    fdw = make_fdw()
    ctx = Context(server_options=server_options, table_options=table_options)
    fdw.begin_modify(ctx)
    return fdw, ctx


def _row(**values):
    return Row(cols=list(values), cells=list(values.values()))


class TestInsert:
    """Tests for POST on insert."""

    def test_posts_body(self, modify, transport):
        fdw, ctx = modify
        transport.add(f"{BASE}/users", {"id": "new"}, status=201, method=HttpMethod.POST)

        fdw.insert(ctx, _row(name=Cell.string("Alice"), age=Cell(TypeOid.I32, 30)))

        request = transport.requests[0]
        assert request.method is HttpMethod.POST
        assert request.url == f"{BASE}/users"
        assert request.body == '{"name":"Alice","age":30}'

    def test_skips_attrs_and_unset(self, modify, transport):
        fdw, ctx = modify
        transport.add(f"{BASE}/users", {}, status=201, method=HttpMethod.POST)

        fdw.insert(ctx, _row(name=Cell.string("Bo"), nickname=None, attrs=Cell.json("{}")))

        assert transport.requests[0].body == '{"name":"Bo"}'

    def test_counts_rows_out(self, modify, transport, metrics):
        fdw, ctx = modify
        transport.add(f"{BASE}/users", {}, status=201, method=HttpMethod.POST)
        fdw.insert(ctx, _row(name=Cell.string("Cy")))
        assert metrics.get(Metric.ROWS_OUT) == 1

    def test_error_status_raises(self, modify, transport):
        fdw, ctx = modify
        transport.add(f"{BASE}/users", '{"error":"invalid"}', status=422, method=HttpMethod.POST)
        with pytest.raises(TransportError, match="HTTP status 422") as exc_info:
            fdw.insert(ctx, _row(name=Cell.string("Di")))
        assert exc_info.value.response_body == '{"error":"invalid"}'

    def test_not_insertable(self, make_fdw, server_options, transport):
        fdw = make_fdw()
        ctx = Context(
            server_options=server_options,
            table_options={"endpoint": "/users", "rowid_column": "id", "insertable": "false"},
        )
        fdw.begin_modify(ctx)
        with pytest.raises(OperationNotAllowedError, match="INSERT is not allowed on endpoint '/users'"):
            fdw.insert(ctx, _row(name=Cell.string("Ed")))
        assert transport.requests == []


class TestUpdate:
    """Tests for PATCH on update."""

    def test_patches_resource(self, modify, transport):
        fdw, ctx = modify
        transport.add(f"{BASE}/users/u1", {}, method=HttpMethod.PATCH)

        fdw.update(ctx, Cell.string("u1"), _row(name=Cell.string("New")))

        request = transport.requests[0]
        assert request.method is HttpMethod.PATCH
        assert request.url == f"{BASE}/users/u1"
        assert request.body == '{"name":"New"}'

    def test_integer_rowid(self, modify, transport):
        fdw, ctx = modify
        transport.add(f"{BASE}/users/42", {}, method=HttpMethod.PATCH)
        fdw.update(ctx, Cell(TypeOid.I32, 42), _row(active=Cell(TypeOid.BOOL, False)))
        assert transport.requests[0].body == '{"active":false}'

    def test_invalid_rowid_rejected_before_request(self, modify, transport):
        fdw, ctx = modify
        with pytest.raises(RowIdError):
            fdw.update(ctx, Cell(TypeOid.F64, 1.5), _row(name=Cell.string("x")))
        assert transport.requests == []

    def test_not_updatable(self, make_fdw, server_options):
        fdw = make_fdw()
        ctx = Context(
            server_options=server_options,
            table_options={"endpoint": "/users", "rowid_column": "id", "updatable": "no"},
        )
        fdw.begin_modify(ctx)
        with pytest.raises(OperationNotAllowedError) as exc_info:
            fdw.update(ctx, Cell.string("u1"), _row())
        assert exc_info.value.operation == "UPDATE"


class TestDelete:
    """Tests for DELETE."""

    def test_deletes_resource(self, modify, transport):
        fdw, ctx = modify
        transport.add(f"{BASE}/users/7", "", status=204, method=HttpMethod.DELETE)

        fdw.delete(ctx, Cell.i64(7))

        request = transport.requests[0]
        assert request.method is HttpMethod.DELETE
        assert request.url == f"{BASE}/users/7"
        assert request.body == ""

    def test_invalid_rowid(self, modify, transport):
        fdw, ctx = modify
        with pytest.raises(RowIdError, match="bool"):
            fdw.delete(ctx, Cell(TypeOid.BOOL, True))
        assert transport.requests == []

    def test_not_found_raises(self, modify, transport):
        fdw, ctx = modify
        transport.add(f"{BASE}/users/9", "gone", status=404, method=HttpMethod.DELETE)
        with pytest.raises(TransportError) as exc_info:
            fdw.delete(ctx, Cell.i64(9))
        assert exc_info.value.status_code == 404

    def test_not_deletable(self, make_fdw, server_options):
        fdw = make_fdw()
        ctx = Context(
            server_options=server_options,
            table_options={"endpoint": "/users", "rowid_column": "id", "deletable": "false"},
        )
        fdw.begin_modify(ctx)
        with pytest.raises(OperationNotAllowedError):
            fdw.delete(ctx, Cell.string("u1"))


class TestModifyLifecycle:
    """Tests for begin/end modify."""

    def test_rowid_column_required(self, make_fdw, server_options):
        ctx = Context(server_options=server_options, table_options={"endpoint": "/users"})
        with pytest.raises(ConfigurationError, match="missing required option 'rowid_column'"):
            make_fdw().begin_modify(ctx)

    def test_insert_without_begin(self, make_fdw, server_options):
        with pytest.raises(FdwError, match="begin_modify"):
            make_fdw().insert(Context(server_options=server_options), _row())

    def test_end_modify_clears_state(self, modify):
        fdw, ctx = modify
        fdw.end_modify(ctx)
        with pytest.raises(FdwError, match="begin_modify"):
            fdw.delete(ctx, Cell.string("x"))
