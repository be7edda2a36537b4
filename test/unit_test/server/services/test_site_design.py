"""Unit tests for the page matching rules of banners and popups."""

import pytest

from unipivot.server.services.site_design import matches_page


@pytest.mark.parametrize(
    "path,targets,excludes,expected",
    [
        ("/", [], [], True),
        ("/anything/at/all", [], [], True),
        ("/programs", ["/programs"], [], True),
        ("/programs/bookclub", ["/programs"], [], True),
        ("/programs/bookclub", ["/programs/"], [], True),
        ("/programsx", ["/programs"], [], False),
        ("/blog", ["/programs"], [], False),
        ("/", ["/"], [], True),
        ("/blog", ["/"], [], False),
        ("/programs/apply", ["/programs"], ["/programs/apply"], False),
        ("/programs/apply/step2", [], ["/programs/apply"], False),
        ("/", [], ["/"], False),
        ("/blog", [], ["/"], True),
    ],
)
def test_matches_page(path, targets, excludes, expected):
    assert matches_page(path, targets, excludes) is expected


def test_missing_rule_lists():
    assert matches_page("/notices", None, None) is True
