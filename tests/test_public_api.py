from bandwidth_core import __all__ as exported

def test_public_api_minimal():
    expected = { 'classify', 'resolve_url', 'parse_line', 'read_log', 'fold', 'sort_rows', 'load_context' }
    assert set(exported) == expected
