"""Output formatter: renders translated statements as Go or Python source"""
from abc import ABC, abstractmethod
from typing import Dict, List, Type

from dostrans.error_handling import ConfigurationError
from dostrans.models import Width
from dostrans.statements import (
    Comment,
    CopyRegister,
    Declare,
    Expression,
    InterruptCall,
    Literal,
    MemoryRead,
    MemoryWrite,
    RegisterRead,
    SetRegister,
    StackPop,
    StackPush,
    Statement,
)


class TargetRenderer(ABC):
    """Target-language syntax for the emulation runtime contract"""

    name: str = ""
    indent: str = "\t"
    comment_prefix: str = "//"
    getter: str = "Get"
    annotation_gap: str = " "

    @abstractmethod
    def preamble(self) -> str:
        """Bootstrap code declaring reg, mem, stack and state"""
        pass

    @abstractmethod
    def epilogue(self) -> str:
        """Environment teardown and end of the program"""
        pass

    @abstractmethod
    def register(self, register: str) -> str:
        """Expression naming a register object"""
        pass

    @abstractmethod
    def code(self, statement: Statement) -> str:
        """Code for one statement, without indentation or annotation"""
        pass

    def expression(self, expr: Expression) -> str:
        if isinstance(expr, Literal):
            return expr.text
        if isinstance(expr, RegisterRead):
            return self.read_register(expr.register)
        if isinstance(expr, MemoryRead):
            return f"mem[{self.expression(expr.address)}]"
        raise TypeError(f"Unknown expression: {expr!r}")

    def read_register(self, register: str) -> str:
        return f"{self.register(register)}.{self.getter}()"

    def render(self, statement: Statement) -> str:
        """One output line, annotated with the source instruction"""
        if isinstance(statement, Comment):
            return f"{self.indent}{self.comment_prefix} {statement.source}"
        return f"{self.indent}{self.code(statement)}{self.annotation_gap}{self.comment_prefix} {statement.source}"


class GoRenderer(TargetRenderer):
    """Go against github.com/xyproto/interrupts"""

    name = "go"
    indent = "\t"
    comment_prefix = "//"
    getter = "Get"

    _SETTERS = {Width.WORD: "Set", Width.HIGH: "SetH", Width.LOW: "SetL"}

    def preamble(self) -> str:
        return """package main

import (
\tdos "github.com/xyproto/interrupts"
)

var (
\treg dos.Registers
\tmem dos.Memory
\tstack dos.Stack
\tflags dos.Flags
\tstate = &dos.State{&reg, &mem, &stack, &flags}
)

func main() {
\tdos.Init()
\tgo dos.Loop(&mem)
"""

    def epilogue(self) -> str:
        return "\tdos.Quit()\n}\n"

    def register(self, register: str) -> str:
        return f"reg.{register.upper()}()"

    def code(self, statement: Statement) -> str:
        if isinstance(statement, Declare):
            return f'reg.Declare("{statement.register}")'
        if isinstance(statement, CopyRegister):
            return f"{self.register(statement.register)}.SetR({self.register(statement.source_register)})"
        if isinstance(statement, SetRegister):
            setter = self._SETTERS[statement.width]
            return f"{self.register(statement.register)}.{setter}({self.expression(statement.value)})"
        if isinstance(statement, MemoryWrite):
            return f"mem.Set({statement.offset}, {self.expression(statement.value)})"
        if isinstance(statement, InterruptCall):
            return f"dos.Interrupt({statement.vector}, state)"
        if isinstance(statement, StackPush):
            return f"stack = append(stack, {self.read_register(statement.register)})"
        if isinstance(statement, StackPop):
            return (f"{self.register(statement.register)}.Set(stack[len(stack)-1]); "
                    f"stack = stack[:len(stack)-1]")
        raise TypeError(f"Unknown statement: {statement!r}")


class PythonRenderer(TargetRenderer):
    """Python against a runtime module exposing the same contract"""

    name = "python"
    indent = "    "
    comment_prefix = "#"
    getter = "get"
    annotation_gap = "  "

    _SETTERS = {Width.WORD: "set", Width.HIGH: "set_h", Width.LOW: "set_l"}

    def preamble(self) -> str:
        return """from interrupts import dos

reg = dos.Registers()
mem = dos.Memory()
stack = dos.Stack()
flags = dos.Flags()
state = dos.State(reg, mem, stack, flags)


def main():
    dos.init()
    dos.start_loop(mem)
"""

    def epilogue(self) -> str:
        return "    dos.quit()\n\n\nif __name__ == \"__main__\":\n    main()\n"

    def register(self, register: str) -> str:
        return f"reg.{register}"

    def code(self, statement: Statement) -> str:
        if isinstance(statement, Declare):
            return f'reg.declare("{statement.register}")'
        if isinstance(statement, CopyRegister):
            return f"{self.register(statement.register)}.set_r({self.register(statement.source_register)})"
        if isinstance(statement, SetRegister):
            setter = self._SETTERS[statement.width]
            return f"{self.register(statement.register)}.{setter}({self.expression(statement.value)})"
        if isinstance(statement, MemoryWrite):
            return f"mem.set({statement.offset}, {self.expression(statement.value)})"
        if isinstance(statement, InterruptCall):
            return f"dos.interrupt({statement.vector}, state)"
        if isinstance(statement, StackPush):
            return f"stack.append({self.read_register(statement.register)})"
        if isinstance(statement, StackPop):
            return f"{self.register(statement.register)}.set(stack.pop())"
        raise TypeError(f"Unknown statement: {statement!r}")


RENDERERS: Dict[str, Type[TargetRenderer]] = {
    GoRenderer.name: GoRenderer,
    PythonRenderer.name: PythonRenderer,
}


def get_renderer(target: str) -> TargetRenderer:
    """
    Factory for target renderers.

    Raises:
        ConfigurationError: If the target language is unknown
    """
    try:
        return RENDERERS[target]()
    except KeyError:
        raise ConfigurationError(
            f"Unsupported target language: {target}",
            suggestion=f"Choose one of: {', '.join(sorted(RENDERERS))}"
        )


class OutputFormatter:
    """Assembles preamble, per-instruction lines and epilogue into one program"""

    def __init__(self, target: str = "go"):
        self.renderer = get_renderer(target)

    def format(self, statements: List[Statement]) -> str:
        """
        Render a statement list into the final program text.

        Args:
            statements: Translator output in program order

        Returns:
            Complete source file for the target language
        """
        output_lines = [self.renderer.preamble()]
        for statement in statements:
            output_lines.append(self.renderer.render(statement) + "\n")
        output_lines.append(self.renderer.epilogue())
        return "".join(output_lines)
