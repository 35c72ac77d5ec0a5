"""
Unit tests for broker registration and the downline tree.
"""

import pytest

from services import BrokerNotFound, InvalidRequest, create_broker, downline_tree


class TestCreateBroker:

    def test_upline_must_exist(self, stores):
        with pytest.raises(BrokerNotFound):
            create_broker(stores, "Orphan", upline_id=77)

    def test_email_normalised(self, stores):
        broker = create_broker(stores, "Anita", email=" Anita@Example.com ")

        assert broker.email == "anita@example.com"

    def test_name_required(self, stores):
        with pytest.raises(InvalidRequest):
            create_broker(stores, " ")


class TestDownlineTree:

    def test_nested_levels(self, stores, chain):
        """Test the tree from the top broker down to the seller."""
        seller, middle, top = chain

        tree = downline_tree(stores, top.id)

        assert tree["id"] == top.id
        assert tree["level"] == 0
        assert tree["children"][0]["id"] == middle.id
        assert tree["children"][0]["children"][0]["id"] == seller.id
        assert tree["children"][0]["children"][0]["level"] == 2

    def test_max_depth(self, stores, chain):
        _, middle, top = chain

        tree = downline_tree(stores, top.id, max_depth=1)

        assert tree["children"][0]["id"] == middle.id
        assert tree["children"][0]["children"] == []

    def test_cycle_is_not_expanded_twice(self, stores):
        first = create_broker(stores, "First")
        second = create_broker(stores, "Second", upline_id=first.id)
        first.upline_id = second.id

        tree = downline_tree(stores, first.id)

        assert tree["children"][0]["id"] == second.id
        assert tree["children"][0]["children"] == []
