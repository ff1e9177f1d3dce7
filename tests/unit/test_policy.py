"""
Unit tests for the pegin confirmation policy.
"""

import pytest

from pegin_toolkit.proofs.policy import get_confirmation_depth
from pegin_toolkit.shared.exceptions import ConfigurationException


class TestConfirmationDepth:
    @pytest.mark.parametrize("network", ["mainnet", "testnet", "regtest", "signet"])
    def test_coinbase_requires_maturity_everywhere(self, network):
        assert get_confirmation_depth(True, network) == 100

    def test_mainnet_regular_output(self):
        assert get_confirmation_depth(False, "mainnet") == 19

    @pytest.mark.parametrize("network", ["testnet", "regtest", "signet"])
    def test_test_networks_need_one_confirmation(self, network):
        assert get_confirmation_depth(False, network) == 1

    def test_unknown_network(self):
        with pytest.raises(ConfigurationException, match="Unsupported Bitcoin network"):
            get_confirmation_depth(False, "litecoin")
