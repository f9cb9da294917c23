import argparse

import pytest

from link_scribe import cli


def test_parser_defaults():
    args = cli.build_parser().parse_args(["check", "example.com"])
    assert args.recursive is False
    assert args.max_depth == 3
    assert args.batch_size == 3
    assert args.proxy is None and args.direct is False
    assert args.csv is None


def test_csv_flag_without_path_uses_default_name():
    args = cli.build_parser().parse_args(["check", "example.com", "--csv"])
    assert args.csv == ""


def test_direct_and_proxy_are_exclusive():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["check", "example.com", "--direct", "--proxy", "https://p/?u="])


def test_invalid_url_exits_with_error_before_network():
    assert cli.main(["check", "http://"]) == cli.EXIT_ERROR


def test_batch_size_must_be_positive():
    assert cli.main(["check", "example.com", "--batch-size", "0"]) == cli.EXIT_ERROR


@pytest.mark.asyncio
async def test_check_command_end_to_end(fake_web, tmp_path):
    fake_web.add("https://site.test/", "/a", "/b")
    fake_web.add("https://site.test/a")
    fake_web.add("https://site.test/b", status=404)
    csv_path = tmp_path / "report.csv"
    args = argparse.Namespace(
        url="site.test/", recursive=False, max_depth=3, batch_size=3, timeout=2.0,
        direct=False, proxy=[fake_web.prefix()], csv=str(csv_path), verbose=False,
    )

    code = await cli.run_check(args)

    assert code == cli.EXIT_BROKEN
    rows = csv_path.read_text(encoding="utf-8").splitlines()
    assert rows[1:] == ["https://site.test/a,Working,200,", "https://site.test/b,Broken,404,404 Not Found"]


@pytest.mark.asyncio
async def test_check_command_unreachable_page(fake_web):
    args = argparse.Namespace(
        url="https://site.test/", recursive=False, max_depth=3, batch_size=3, timeout=2.0,
        direct=False, proxy=[fake_web.prefix("/down")], csv=None, verbose=False,
    )
    assert await cli.run_check(args) == cli.EXIT_ERROR
