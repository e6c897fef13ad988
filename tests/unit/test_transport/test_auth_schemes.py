"""Unit tests for authentication scheme parsing and selection."""

import pytest

from src.transport.auth import (
    NO_AUTH_SCHEME,
    AuthScheme,
    choose_auth_scheme,
    parse_auth_challenges,
    scheme_name,
)


class TestChooseAuthScheme:
    """Tests for choose_auth_scheme."""

    @pytest.mark.parametrize(
        ("supported", "expected"),
        [
            (AuthScheme.BASIC | AuthScheme.NEGOTIATE, AuthScheme.NEGOTIATE),
            (AuthScheme.BASIC | AuthScheme.NTLM, AuthScheme.NTLM),
            (AuthScheme.BASIC | AuthScheme.PASSPORT, AuthScheme.PASSPORT),
            (AuthScheme.BASIC | AuthScheme.DIGEST, AuthScheme.DIGEST),
            (AuthScheme.BASIC, AuthScheme.BASIC),
        ],
    )
    def test_preference_order(
        self, supported: AuthScheme, expected: AuthScheme
    ) -> None:
        """The strongest offered scheme is chosen."""
        assert choose_auth_scheme(supported) == expected

    def test_empty_mask(self) -> None:
        """No offered scheme yields no scheme."""
        assert choose_auth_scheme(0) == NO_AUTH_SCHEME

    def test_unknown_bits_ignored(self) -> None:
        """Bits outside the known schemes are ignored."""
        assert choose_auth_scheme(0x100) == NO_AUTH_SCHEME


class TestParseAuthChallenges:
    """Tests for parse_auth_challenges."""

    def test_multiple_headers(self) -> None:
        """Schemes from several header values are combined."""
        supported, first = parse_auth_challenges(["Negotiate", "NTLM", "Basic realm=x"])

        assert supported == AuthScheme.NEGOTIATE | AuthScheme.NTLM | AuthScheme.BASIC
        assert first == AuthScheme.NEGOTIATE

    def test_comma_joined_challenges(self) -> None:
        """Challenges joined in one value are all found."""
        supported, first = parse_auth_challenges(
            ['Basic realm="a", Digest realm="b", nonce="c"']
        )

        assert supported == AuthScheme.BASIC | AuthScheme.DIGEST
        assert first == AuthScheme.BASIC

    def test_parameters_not_mistaken_for_schemes(self) -> None:
        """Auth parameters named like schemes are not schemes."""
        supported, _ = parse_auth_challenges(['Digest realm="x", basic="y"'])

        assert supported == AuthScheme.DIGEST

    def test_scheme_words_inside_quotes_ignored(self) -> None:
        """Commas and scheme names inside quoted values are not challenges."""
        supported, first = parse_auth_challenges(
            ['Basic realm="a, Negotiate x"', 'Digest realm="say \\"NTLM\\", ok"']
        )

        assert supported == AuthScheme.BASIC | AuthScheme.DIGEST
        assert first == AuthScheme.BASIC
        assert choose_auth_scheme(supported) == AuthScheme.DIGEST

    def test_case_insensitive(self) -> None:
        """Scheme names match in any case."""
        supported, _ = parse_auth_challenges(["bAsIc realm=x"])

        assert supported == AuthScheme.BASIC

    def test_unknown_scheme(self) -> None:
        """Unknown schemes yield an empty mask."""
        assert parse_auth_challenges(["Bearer realm=x"]) == (
            NO_AUTH_SCHEME,
            NO_AUTH_SCHEME,
        )


class TestSchemeName:
    """Tests for scheme_name."""

    def test_names(self) -> None:
        """Schemes have their wire names."""
        assert scheme_name(AuthScheme.NTLM) == "NTLM"
        assert scheme_name(AuthScheme.DIGEST) == "Digest"
        assert scheme_name(NO_AUTH_SCHEME) == "None"
