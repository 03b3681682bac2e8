"""Method replacement: swap one method body for a container component.

``PriceCalculator.total`` is reimplemented by a ``MethodReplacer`` registered
in the container. Other methods keep their behavior, and the replacer can
still call the original function when it wants to.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from diforge import (
    ConstructorSelector,
    Container,
    Definition,
    OverridableMethod,
    ReplaceOverride,
)


class PriceCalculator:
    def __init__(self, currency: str = "EUR") -> None:
        self.currency = currency

    def total(self, amount: int, quantity: int) -> int:
        return amount * quantity

    def label(self, amount: int, quantity: int) -> str:
        return f"{self.total(amount, quantity)} {self.currency}"


class DiscountReplacer:
    def reimplement(
        self,
        receiver: Any,
        method: OverridableMethod,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
    ) -> Any:
        full_price = method.function(receiver, *args, **kwargs)
        return full_price - full_price // 10


def main() -> None:
    container = Container()
    container.add_definition("discount", Definition(DiscountReplacer))
    container.add_definition(
        "calculator",
        Definition(
            PriceCalculator,
            constructor_selector=ConstructorSelector(args=("USD",)),
            overrides=[ReplaceOverride("total", "discount")],
        ),
    )

    calculator = container.resolve("calculator", PriceCalculator)
    print(f"total={calculator.total(50, 2)}")  # => total=90
    print(f"label={calculator.label(20, 5)}")  # => label=90 USD
    print(f"plain_total={PriceCalculator().total(50, 2)}")  # => plain_total=100


if __name__ == "__main__":
    main()
