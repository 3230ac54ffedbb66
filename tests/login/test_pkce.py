import base64
import hashlib
import string

import pytest

from solid_authn.login.pkce import (
    PKCEParameters,
    generate_code_challenge,
    generate_code_verifier,
    generate_pkce_parameters,
    generate_state,
)


class TestPKCEParameters:
    def test_generate_parameters_crypto_requirements(self) -> None:
        # Act
        params = generate_pkce_parameters()

        # Assert RFC 7636 requirements
        assert 43 <= len(params.code_verifier) <= 128
        assert set(params.code_verifier) <= set(
            string.ascii_letters + string.digits + "-._~"
        )
        assert params.code_challenge_method == "S256"

        expected_challenge = (
            base64.urlsafe_b64encode(
                hashlib.sha256(params.code_verifier.encode("ascii")).digest()
            )
            .decode("ascii")
            .rstrip("=")
        )
        assert params.code_challenge == expected_challenge

    def test_generate_parameters_uniqueness(self) -> None:
        params1 = generate_pkce_parameters()
        params2 = generate_pkce_parameters()

        assert params1.code_verifier != params2.code_verifier
        assert params1.code_challenge != params2.code_challenge

    def test_rfc7636_appendix_b_example(self) -> None:
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"

        assert generate_code_challenge(verifier) == (
            "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"
        )

    def test_verifier_is_hidden_from_repr(self) -> None:
        params = generate_pkce_parameters()

        assert params.code_verifier not in repr(params)

    @pytest.mark.parametrize("length", [42, 129])
    def test_rejects_out_of_range_verifier_length(self, length) -> None:
        with pytest.raises(ValueError):
            generate_code_verifier(length)

    def test_rejects_plain_challenge_method(self) -> None:
        with pytest.raises(ValueError, match="S256"):
            PKCEParameters(
                code_verifier="a" * 43,
                code_challenge="b" * 43,
                code_challenge_method="plain",
            )


class TestGenerateState:
    def test_state_is_url_safe_and_unique(self) -> None:
        states = {generate_state() for _ in range(50)}

        assert len(states) == 50
        for state in states:
            assert len(state) >= 32
            assert set(state) <= set(string.ascii_letters + string.digits + "-_")
