import datetime
import logging
from abc import ABC, abstractmethod
from typing import Annotated, Optional, Protocol

from fabricant import (
    Factory,
    Inject,
    InjectIgnore,
    InjectOptional,
    LifecycleObject,
    inject,
    inject_optional,
)


class Printer(ABC):
    @abstractmethod
    def print(self, line: str):
        pass


class MockPrinter(Printer):
    def __init__(self):
        self.printed = []

    def print(self, line: str):
        self.printed.append(line)


class Greeter(ABC):
    @abstractmethod
    def greet(self, name: str) -> str:
        pass


class EnglishGreeter(Greeter):
    def greet(self, name: str) -> str:
        return f"Hello {name}"


class LoudGreeter(EnglishGreeter):
    def greet(self, name: str) -> str:
        return super().greet(name).upper()


class Lobby:
    def __init__(self, greeter: Greeter, printer: Printer):
        self.greeter = greeter
        self.printer = printer

    def welcome(self, name: str):
        self.printer.print(self.greeter.greet(name))


class GrandLobby(Lobby):
    pass


class Other(ABC):
    @abstractmethod
    def name(self) -> str:
        pass


class DefaultOther(Other):
    def name(self) -> str:
        return "default"


class Service(ABC):
    @abstractmethod
    def run(self) -> str:
        pass


class DefaultService(Service):
    def __init__(self, other: Other):
        self.other = other

    def run(self) -> str:
        return self.other.name()


class Clock(Protocol):
    def now(self) -> float:
        ...


class SystemClock(Clock):
    def __init__(self):
        self.ticks = 0.0

    def now(self) -> float:
        return self.ticks


class Dated:
    def __init__(self, day: datetime.date):
        self.day = day


class Chicken:
    def __init__(self, egg: "Egg"):
        self.egg = egg


class Egg:
    def __init__(self, chicken: Chicken):
        self.chicken = chicken


class Widget(LifecycleObject):
    def __init__(self):
        super().__init__()
        self.calls = []

    def awake(self):
        self.calls.append("awake")

    def start(self):
        self.calls.append("start")


class WidgetFactory(Factory[Widget]):
    pass


class Spawner:
    def __init__(self, widgets: Factory[Widget]):
        self.widgets = widgets


class Node:
    def __init__(self, children: Factory["Node"]):
        self.children = children


class Plain(LifecycleObject):
    def __init__(self):
        self.started = False

    def start(self):
        self.started = True


class Ticker(LifecycleObject):
    def __init__(self):
        super().__init__()
        self.ticks = []

    def update(self, delta: float):
        self.ticks.append(delta)


class Chatty:
    def __init__(self, logger: logging.Logger):
        self.logger = logger


class Shape:
    pass


class Circle(Shape):
    pass


class Square(Shape):
    pass


class Triangle(Shape):
    pass


class Canvas:
    def __init__(self, shape: Shape, printer: Printer):
        self.shape = shape
        self.printer = printer


class Timed:
    def __init__(self, printer: Printer, timeout: float = 1.0):
        self.printer = printer
        self.timeout = timeout


class Tagged:
    def __init__(self, printer: Printer, tag: Annotated[str, InjectIgnore()]):
        self.printer = printer
        self.tag = tag


class Configured:
    def __init__(self, name: str, printer: Printer):
        self.name = name
        self.printer = printer

    @classmethod
    @inject
    def from_printer(cls, printer: Printer) -> "Configured":
        return cls("default", printer)


class FieldInjected:
    printer: Annotated[Printer, Inject()]
    greeter: Annotated[Greeter, InjectOptional()] = None
    plain: Printer = None


class DerivedFieldInjected(FieldInjected):
    logger: Annotated[logging.Logger, Inject()]


class PropertyInjected:
    def __init__(self):
        self._printer = None

    @property
    def printer(self) -> Optional[Printer]:
        return self._printer

    @printer.setter
    @inject
    def printer(self, value: Printer):
        self._printer = value


class MethodInjected:
    def __init__(self):
        self.calls = []

    @inject
    def attach(self, printer: Printer, greeter: Greeter, volume: int = 3):
        self.calls.append((printer, greeter, volume))

    @inject_optional
    def attach_other(self, other: Other):
        self.calls.append(other)


class CyclicMembersA:
    partner: Annotated["CyclicMembersB", Inject()]


class CyclicMembersB:
    partner: Annotated[CyclicMembersA, Inject()]
