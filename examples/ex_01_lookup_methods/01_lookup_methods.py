"""Lookup methods: a shared component asking for fresh collaborators.

A shared ``CommandManager`` needs a new ``Command`` for every request. Instead
of holding a reference to the container, it declares ``create_command`` and
lets a lookup override return a fresh ``Command`` on each call.
"""

from __future__ import annotations

from diforge import Container, Definition, LookupOverride, Scope


class Command:
    def __init__(self) -> None:
        self.state: dict[str, str] = {}

    def execute(self) -> str:
        return f"executed {self.state['target']}"


class CommandManager:
    def process(self, target: str) -> str:
        command = self.create_command()
        command.state["target"] = target
        return command.execute()

    def create_command(self) -> Command:
        raise NotImplementedError


def main() -> None:
    container = Container()
    container.add_definition("command", Definition(Command, scope=Scope.FRESH))
    container.add_definition(
        "manager",
        Definition(CommandManager, overrides=[LookupOverride("create_command", "command")]),
    )

    manager = container.resolve("manager", CommandManager)
    print(manager.process("backup"))  # => executed backup
    print(manager.process("report"))  # => executed report

    first = manager.create_command()
    second = manager.create_command()
    print(f"fresh_commands={first is not second}")  # => fresh_commands=True
    print(f"manager_shared={manager is container.resolve('manager')}")  # => manager_shared=True
    print(f"is_subclass={isinstance(manager, CommandManager)}")  # => is_subclass=True


if __name__ == "__main__":
    main()
