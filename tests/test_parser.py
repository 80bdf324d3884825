"""Tests for listing normalization and instruction parsing"""
import pytest

from dostrans.error_handling import MalformedOperandCount
from dostrans.models import Interrupt, Mov, Pop, Push, Unmodeled
from dostrans.parser import AssemblyParser, normalize_line, normalize_listing, strip_size_specifier


@pytest.fixture
def parser():
    return AssemblyParser()


def test_normalize_line_strips_comment_and_whitespace():
    assert normalize_line("   mov ax,0x13   ; set mode 13h") == "mov ax,0x13"
    assert normalize_line("; only a comment") == ""
    assert normalize_line("\tint 0x10\r") == "int 0x10"


def test_normalize_listing_drops_empty_lines_and_keeps_order():
    listing = "mov ah,0x9\n\n   \n; banner\nint 0x21 ; print\nret\n"
    assert normalize_listing(listing) == ["mov ah,0x9", "int 0x21", "ret"]


def test_strip_size_specifier():
    assert strip_size_specifier("word [0x100]") == "[0x100]"
    assert strip_size_specifier("byte ptr [bx]") == "[bx]"
    assert strip_size_specifier("wordy") == "wordy"


def test_parse_mov(parser):
    instruction = parser.parse_instruction("mov ax,0x13")
    assert instruction == Mov(text="mov ax,0x13", mnemonic="mov", destination="ax", source="0x13")


def test_parse_mov_removes_size_keywords(parser):
    instruction = parser.parse_instruction("mov word [0x100],0x5")
    assert instruction.destination == "[0x100]"
    assert instruction.source == "0x5"


def test_mov_with_too_many_commas_is_fatal(parser):
    with pytest.raises(MalformedOperandCount) as excinfo:
        parser.parse_instruction("mov ax, bx, cx")
    assert excinfo.value.line == "mov ax, bx, cx"
    assert "mov ax, bx, cx" in str(excinfo.value)


@pytest.mark.parametrize("line", ["mov ax", "mov", "mov ax,"])
def test_mov_with_too_few_operands_is_fatal(parser, line):
    with pytest.raises(MalformedOperandCount):
        parser.parse_instruction(line)


def test_parse_int_push_pop(parser):
    assert parser.parse_instruction("int 0x21") == Interrupt(text="int 0x21", mnemonic="int", vector="0x21")
    assert parser.parse_instruction("push cx") == Push(text="push cx", mnemonic="push", operand="cx")
    assert parser.parse_instruction("pop dx") == Pop(text="pop dx", mnemonic="pop", operand="dx")


def test_push_size_keyword_is_removed(parser):
    assert parser.parse_instruction("push word [bx+si]").operand == "[bx+si]"


@pytest.mark.parametrize("line", ["int", "push", "pop"])
def test_single_operand_mnemonics_need_an_operand(parser, line):
    with pytest.raises(MalformedOperandCount) as excinfo:
        parser.parse_instruction(line)
    assert excinfo.value.line == line


def test_single_operand_mnemonics_reject_extra_operands(parser):
    with pytest.raises(MalformedOperandCount):
        parser.parse_instruction("int 0x21 0x10")


@pytest.mark.parametrize("line", ["jmp 0x100", "movsb", "pushf", "popa", "int3", "add ax,bx", "MOV ax,bx"])
def test_other_mnemonics_are_unmodeled(parser, line):
    instruction = parser.parse_instruction(line)
    assert isinstance(instruction, Unmodeled)
    assert instruction.text == line


def test_bracketed_operand_with_spaces_is_one_operand():
    parser = AssemblyParser()
    assert parser.parse_instruction("push word [bx + 4]").operand == "[bx + 4]"
    assert parser.parse_instruction("pop [bx + si]").operand == "[bx + si]"
