"""Factories: components that produce other objects.

A component implementing ``produce``, ``produced_type`` and ``is_shared`` is
replaced by its product when resolved. Ask for the producer itself with
``resolve_producer``.
"""

from __future__ import annotations

from diforge import Container, Definition, NotAFactoryError


class Connection:
    def __init__(self, url: str) -> None:
        self.url = url


class ConnectionFactory:
    def __init__(self, url: str = "sqlite://memory") -> None:
        self.url = url
        self.produced = 0

    def produce(self) -> Connection:
        self.produced += 1
        return Connection(self.url)

    def produced_type(self) -> type[Connection]:
        return Connection

    def is_shared(self) -> bool:
        return False


def main() -> None:
    container = Container()
    container.add_definition("connection", Definition(ConnectionFactory))

    connection = container.resolve("connection", Connection)
    print(f"url={connection.url}")  # => url=sqlite://memory
    print(f"new_per_call={connection is not container.resolve('connection')}")  # => new_per_call=True

    factory = container.resolve_producer("connection", ConnectionFactory)
    print(f"produced={factory.produced}")  # => produced=2
    print(f"type={container.get_type('connection').__name__}")  # => type=Connection

    container.add_instance("plain", Connection("sqlite://other"))
    try:
        container.resolve_producer("plain")
    except NotAFactoryError as error:
        print(type(error).__name__)  # => NotAFactoryError


if __name__ == "__main__":
    main()
