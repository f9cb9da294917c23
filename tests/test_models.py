import dataclasses

import pytest

from link_scribe.models import BatchProgress, LinkCheckResult


def test_wire_shape_omits_absent_fields():
    assert LinkCheckResult("https://a.test/", True, 200).to_dict() == {
        "url": "https://a.test/", "isWorking": True, "statusCode": 200,
    }
    assert LinkCheckResult("https://a.test/", False, error="Connection failed", source_page="https://p.test/").to_dict() == {
        "url": "https://a.test/", "isWorking": False, "error": "Connection failed", "sourcePage": "https://p.test/",
    }


def test_from_dict_reverses_to_dict():
    result = LinkCheckResult("https://a.test/", False, 404, "404 Not Found", "https://p.test/")
    assert LinkCheckResult.from_dict(result.to_dict()) == result


def test_results_are_immutable():
    result = LinkCheckResult("https://a.test/", True, 200)
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.is_working = False


def test_batch_progress_percent():
    assert BatchProgress(None, (), 1, 3).percent == 33.3
    assert BatchProgress(None, (), 0, 0).percent == 100.0
