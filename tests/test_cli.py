import pytest

from pet import PetCLI
from deskpet import keys
from deskpet.database import store
from deskpet.models import PetState
from deskpet.todos import todo_manager


@pytest.fixture()
def cli():
    return PetCLI()


def test_parser_wires_subcommands(cli):
    parser = cli.create_parser()

    args = parser.parse_args(["remind", "set", "inactivity-warning", "3"])
    assert args.func == cli.cmd_remind_set
    assert args.hours == 3.0

    args = parser.parse_args(["widget", "--size", "medium", "--watch"])
    assert args.size == "medium" and args.watch

    args = parser.parse_args(["notify", "--category", "healthReminder", "--in", "5"])
    assert args.message == [] and args.in_seconds == 5.0


def test_unknown_state_is_rejected(cli):
    with pytest.raises(SystemExit):
        cli.create_parser().parse_args(["state", "set", "flying"])


def test_state_set_publishes(cli):
    cli.run(["state", "set", "restNeeded"])
    assert PetState(store.get(keys.SHARED_STATE)) == PetState.REST_NEEDED


def test_todo_commands(cli):
    cli.run(["todo", "add", "Buy", "cat", "food"])
    todo = todo_manager.todos[-1]
    assert todo.text == "Buy cat food"

    cli.run(["todo", "toggle", todo.id[:8]])
    assert todo.is_completed

    cli.run(["todo", "delete", todo.id[:8]])
    assert todo not in todo_manager.todos


def test_unknown_todo_raises_value_error(cli):
    with pytest.raises(ValueError, match="Todo not found"):
        cli.run(["todo", "toggle", "does-not-exist"])


def test_notify_without_text_needs_a_library(cli):
    cli.library.messages = []
    with pytest.raises(ValueError, match="No library messages"):
        cli.run(["notify", "--category", "achievement"])
