"""Tests for deckshare CLI helper functions."""

import argparse
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest
import yaml

from deckshare.cli.helpers import (
    format_decklist_row,
    load_yaml_config,
    read_cards,
    resolve_user,
    run_handler,
)
from deckshare.cli.result import MessageType, success
from deckshare.errors import CardListInputError, NotFoundError


class TestLoadYamlConfig:
    """Test cases for load_yaml_config helper function."""

    def test_load_yaml_config_success(self, tmp_path):
        config_data = {"factions": [{"code": "stark", "name": "House Stark"}]}
        path = tmp_path / "catalog.yaml"
        path.write_text(yaml.dump(config_data))

        assert load_yaml_config(str(path)) == config_data

    def test_empty_file(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("")

        assert load_yaml_config(str(path)) == {}

    def test_load_yaml_config_file_not_found(self, tmp_path):
        assert load_yaml_config(str(tmp_path / "missing.yaml")) is None

    def test_load_yaml_config_invalid_yaml(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("factions: [unclosed")

        with pytest.raises(yaml.YAMLError):
            load_yaml_config(str(path))


class TestResolveUser:
    @patch("deckshare.cli.helpers.user_service")
    def test_anonymous(self, mock_users, mock_logger):
        mock_users.current_user.return_value = None

        assert resolve_user(argparse.Namespace(user=None)) is None
        mock_logger["warning"].assert_not_called()

    @patch("deckshare.cli.helpers.user_service")
    def test_known_user(self, mock_users):
        alice = Mock()
        mock_users.current_user.return_value = alice

        assert resolve_user(argparse.Namespace(user="alice")) is alice
        mock_users.current_user.assert_called_once_with("alice")

    @patch("deckshare.cli.helpers.user_service")
    def test_unknown_user_warns(self, mock_users, mock_logger):
        mock_users.current_user.return_value = None

        assert resolve_user(argparse.Namespace(user="ghost")) is None
        mock_logger["warning"].assert_called_once()


class TestReadCards:
    def test_entries(self):
        args = argparse.Namespace(file=None, card_entries=["3 01101", "2x 01102"])

        assert read_cards(args) == {"01101": 3, "01102": 2}

    def test_file_and_entries_add_up(self, tmp_path):
        path = tmp_path / "deck.txt"
        path.write_text("# my deck\n1 01027\n3 01101\n")
        args = argparse.Namespace(file=str(path), card_entries=["1 01101"])

        assert read_cards(args) == {"01027": 1, "01101": 4}

    def test_malformed_line(self):
        args = argparse.Namespace(file=None, card_entries=["3"])

        with pytest.raises(CardListInputError):
            read_cards(args)


class TestRunHandler:
    """Test cases for handler dispatch."""

    @patch("deckshare.cli.helpers.resolve_user")
    def test_calls_handler_with_actor(self, mock_resolve):
        handler = Mock(return_value=success("done"))
        args = argparse.Namespace(user="alice")

        result = run_handler({"vote": handler}, "vote", args, "social")

        assert result.message == "done"
        handler.assert_called_once_with(args, mock_resolve.return_value)

    def test_unknown_subcommand(self):
        result = run_handler({}, "dance", argparse.Namespace(), "social")

        assert result.success is False
        assert result.message == "Unknown social subcommand: dance"

    @patch("deckshare.cli.helpers.resolve_user", return_value=None)
    def test_domain_errors_become_results(self, mock_resolve):
        handler = Mock(side_effect=NotFoundError("Decklist", 5))

        result = run_handler({"show": handler}, "show", argparse.Namespace(), "decklist")

        assert result.success is False
        assert result.message_type == MessageType.ERROR
        assert result.message == "Decklist '5' not found"

    @patch("deckshare.cli.helpers.resolve_user", return_value=None)
    def test_other_errors_propagate(self, mock_resolve):
        handler = Mock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            run_handler({"show": handler}, "show", argparse.Namespace(), "decklist")


def test_format_decklist_row():
    decklist = SimpleNamespace(
        id=42,
        name="A very long decklist name that keeps going",
        user=SimpleNamespace(username="alice"),
        created_at=datetime(2024, 3, 5, 12, 0),
        nb_votes=3,
        nb_favorites=1,
        nb_comments=0,
    )

    row = format_decklist_row(decklist)

    assert row.startswith("    42 | A very long decklist name that")
    assert "| alice           | 2024-03-05 |    3 |    1 |    0" in row
