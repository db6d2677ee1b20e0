from pathlib import Path

from curl_converter.parser.batch import extract_curl_commands, find_curl_start, find_unquoted_pipe

FIXTURES = Path(__file__).parent / "fixtures"


class TestExtractCurlCommands:
    def test_fixture_script(self):
        script = (FIXTURES / "api.sh").read_text()
        commands = extract_curl_commands(script)
        assert commands == [
            "curl -s https://api.example.com/health",
            "curl -X POST https://api.example.com/users "
            "-H \"Content-Type: application/json\" "
            "-H 'Authorization: Bearer abc123' "
            "-d '{\"name\":\"Alex\",\"tags\":[\"a\",\"b\"]}'",
            "curl -s -u admin:secret https://api.example.com/token",
        ]

    def test_multiple_commands(self):
        script = """
curl https://api.example.com/users
curl -X POST https://api.example.com/users -d '{"name":"test"}'
"""
        assert extract_curl_commands(script) == [
            "curl https://api.example.com/users",
            "curl -X POST https://api.example.com/users -d '{\"name\":\"test\"}'",
        ]

    def test_comments_and_blank_lines_skipped(self):
        script = "# curl https://commented.example.com\n\n// curl https://also.example.com\n  curl https://example.com\n"
        assert extract_curl_commands(script) == ["curl https://example.com"]

    def test_crlf_line_endings(self):
        script = "curl -X POST \\\r\n  https://example.com\r\n"
        assert extract_curl_commands(script) == ["curl -X POST https://example.com"]

    def test_after_and_operator(self):
        script = "cd /tmp && curl https://example.com/a"
        assert extract_curl_commands(script) == ["curl https://example.com/a"]

    def test_backtick_substitution(self):
        script = "OUT=`curl -s https://example.com/b`"
        assert extract_curl_commands(script) == ["curl -s https://example.com/b"]

    def test_substitution_closer_mid_line(self):
        script = "X=$(curl -s https://example.com/x) && echo ok"
        assert extract_curl_commands(script) == ["curl -s https://example.com/x"]

    def test_quoted_paren_inside_substitution(self):
        script = "OUT=$(curl -d 'a)b' https://example.com)"
        assert extract_curl_commands(script) == ["curl -d 'a)b' https://example.com"]

    def test_quoted_pipe_is_kept(self):
        script = "curl -d 'a|b' https://example.com | jq ."
        assert extract_curl_commands(script) == ["curl -d 'a|b' https://example.com"]

    def test_non_curl_lines_ignored(self):
        assert extract_curl_commands("echo hello\nwget https://example.com\n") == []

    def test_empty_script(self):
        assert extract_curl_commands("") == []

    def test_bare_curl_is_too_short(self):
        assert extract_curl_commands("curl") == []


class TestFindCurlStart:
    def test_line_start(self):
        assert find_curl_start("curl https://example.com") == 0

    def test_tab_after_curl(self):
        assert find_curl_start("curl\thttps://example.com") == 0

    def test_after_semicolon(self):
        assert find_curl_start("echo hi; curl https://example.com") == 9

    def test_after_or_operator(self):
        assert find_curl_start("false || curl https://example.com") == 9

    def test_word_containing_curl(self):
        assert find_curl_start("mycurl https://example.com") == -1

    def test_no_curl(self):
        assert find_curl_start("wget https://example.com") == -1


class TestFindUnquotedPipe:
    def test_plain_pipe(self):
        assert find_unquoted_pipe("curl x | jq") == 7

    def test_pipe_in_single_quotes(self):
        assert find_unquoted_pipe("curl -d 'a|b'") == -1

    def test_pipe_in_double_quotes(self):
        assert find_unquoted_pipe('curl -d "a|b"') == -1

    def test_escaped_pipe(self):
        assert find_unquoted_pipe("curl -d a\\|b") == -1

    def test_backslash_literal_in_single_quotes(self):
        assert find_unquoted_pipe("curl -d 'a\\' | jq") == 13
