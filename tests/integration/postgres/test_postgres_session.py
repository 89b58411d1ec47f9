"""
End-to-end tests against a PostgreSQL container.
"""
import pytest
import sqlalchemy as sa
from foundation import ConnectionFailure, FoundationSessionBuilder, Pager
from foundation import ResultIterator, SessionBuilder


def _show(handler, setting):
    return handler.execute(sa.text(f'show {setting}')).scalar()


def test_session_applies_default_settings(dsn):
    with SessionBuilder({'dsn': dsn}).build_session('settings') as session:
        handler = session.get_connection().get_handler()

        assert _show(handler, 'timezone') == 'US/Eastern'
        assert _show(handler, 'bytea_output') == 'hex'
        assert _show(handler, 'intervalstyle') == 'iso_8601'
        assert _show(handler, 'datestyle').startswith('ISO')
        assert _show(handler, 'standard_conforming_strings') == 'on'


def test_settings_survive_later_transactions(dsn):
    with SessionBuilder({'dsn': dsn}).build_session() as session:
        handler = session.get_connection().get_handler()
        handler.rollback()

        assert _show(handler, 'intervalstyle') == 'iso_8601'


def test_caller_settings(dsn):
    builder = SessionBuilder({'dsn': dsn, 'connection:configuration': {'timezone': 'UTC'}})
    with builder.build_session() as session:
        assert _show(session.get_connection().get_handler(), 'timezone') == 'UTC'


def test_persistent_sessions(dsn):
    builder = FoundationSessionBuilder({'dsn': dsn, 'connection:persist': True})

    with builder.build_session('a') as first, builder.build_session('b') as second:
        assert _show(first.get_connection().get_handler(), 'bytea_output') == 'hex'
        assert _show(second.get_connection().get_handler(), 'bytea_output') == 'hex'


def test_pager_over_query(dsn):
    max_per_page, page = 4, 2
    with SessionBuilder({'dsn': dsn}).build_session() as session:
        handler = session.get_connection().get_handler()
        count = handler.execute(sa.text('select count(*) from test_table')).scalar()
        result = handler.execute(
            sa.text('select name, value from test_table order by id limit :limit offset :offset'),
            {'limit': max_per_page, 'offset': max_per_page * (page - 1)})
        pager = Pager(ResultIterator(result.mappings().all()), count, max_per_page, page)

    assert pager.get_count() == 6
    assert pager.get_result_count() == 2
    assert pager.get_result_min() == 5
    assert pager.get_result_max() == 6
    assert pager.get_last_page() == 2
    assert pager.is_next_page() is False
    assert pager.get_iterator().slice('name') == ['Fiona', 'George']


def test_wrong_password(dsn):
    url = sa.make_url(dsn).set(password='wrong')
    session = SessionBuilder({'dsn': url.render_as_string(hide_password=False)}).build_session()

    with pytest.raises(ConnectionFailure):
        session.get_connection().get_handler()
