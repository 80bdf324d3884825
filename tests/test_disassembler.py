"""Tests for the ndisasm and Capstone disassembler adapters"""
import subprocess

import pytest

from dostrans.config import TranslatorConfig
from dostrans.disassembler import (
    CapstoneDisassembler,
    NdisasmDisassembler,
    create_disassembler,
)
from dostrans.error_handling import DisassemblyError
from dostrans.translator import translate


NDISASM_OUTPUT = (
    "00000100  B413              mov ah,0x13\n"
    "00000102  CD21              int 0x21\n"
    "00000104  C3                ret\n"
)


@pytest.fixture
def com_file(tmp_path):
    path = tmp_path / "hello.com"
    path.write_bytes(b"\xb4\x4c\xcd\x21")
    return path


class TestNdisasm:
    def test_strip_columns(self):
        assert NdisasmDisassembler.strip_columns(NDISASM_OUTPUT).split("\n") == [
            "mov ah,0x13", "int 0x21", "ret", ""
        ]

    def test_command(self):
        disassembler = NdisasmDisassembler(executable="/usr/bin/ndisasm")
        assert disassembler.command("life.com") == ["/usr/bin/ndisasm", "-a", "-b", "16", "-o", "256", "life.com"]

    def test_disassemble_runs_subprocess(self, monkeypatch, com_file):
        calls = []

        def fake_run(command, **kwargs):
            calls.append(command)
            return subprocess.CompletedProcess(command, 0, stdout=NDISASM_OUTPUT, stderr="")

        monkeypatch.setattr(subprocess, "run", fake_run)
        listing = NdisasmDisassembler().disassemble(com_file)
        assert listing.startswith("mov ah,0x13\nint 0x21\nret")
        assert calls[0][-1] == str(com_file)

    def test_missing_executable(self, monkeypatch, com_file):
        def fake_run(command, **kwargs):
            raise FileNotFoundError(command[0])

        monkeypatch.setattr(subprocess, "run", fake_run)
        with pytest.raises(DisassemblyError) as excinfo:
            NdisasmDisassembler().disassemble(com_file)
        assert "ndisasm" in excinfo.value.message
        assert excinfo.value.suggestion

    def test_non_zero_exit(self, monkeypatch, com_file):
        def fake_run(command, **kwargs):
            return subprocess.CompletedProcess(command, 2, stdout="", stderr="bad input")

        monkeypatch.setattr(subprocess, "run", fake_run)
        with pytest.raises(DisassemblyError) as excinfo:
            NdisasmDisassembler().disassemble(com_file)
        assert excinfo.value.context.additional_info == {"stderr": "bad input"}

    def test_timeout(self, monkeypatch, com_file):
        def fake_run(command, **kwargs):
            raise subprocess.TimeoutExpired(command, kwargs["timeout"])

        monkeypatch.setattr(subprocess, "run", fake_run)
        with pytest.raises(DisassemblyError):
            NdisasmDisassembler(timeout=1).disassemble(com_file)


class TestCapstone:
    def test_disassemble_bytes(self):
        lines = CapstoneDisassembler().disassemble_bytes(b"\xb4\x4c\xcd\x21\xc3")
        assert [line.address for line in lines] == [0x100, 0x102, 0x104]
        assert [line.text for line in lines] == ["mov ah, 0x4c", "int 0x21", "ret"]

    def test_undecodable_bytes_become_db_lines(self):
        class NothingDecodes:
            def disasm(self, code, address, count=0):
                return iter(())

        disassembler = CapstoneDisassembler()
        disassembler._cs = NothingDecodes()
        lines = disassembler.disassemble_bytes(b"\xff\x0f")
        assert [line.text for line in lines] == ["db 0xff", "db 0x0f"]
        assert [line.address for line in lines] == [0x100, 0x101]

    def test_ptr_keyword_is_dropped(self):
        assert CapstoneDisassembler._render("mov", "word ptr [0x100], 5") == "mov word [0x100], 5"
        assert CapstoneDisassembler._render("ret", "") == "ret"

    def test_capstone_listing_translates(self, com_file):
        listing = CapstoneDisassembler().disassemble(com_file)
        output = translate(listing)
        assert "\treg.A().SetH(0x4c) // mov ah, 0x4c\n" in output
        assert "\tdos.Interrupt(0x21, state) // int 0x21\n" in output

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(DisassemblyError):
            CapstoneDisassembler().disassemble(tmp_path / "missing.com")


def test_create_disassembler_picks_backend():
    assert isinstance(create_disassembler(TranslatorConfig(backend="capstone")), CapstoneDisassembler)
    ndisasm = create_disassembler(TranslatorConfig(ndisasm_path="nd", disassembler_timeout=5))
    assert isinstance(ndisasm, NdisasmDisassembler)
    assert ndisasm.executable == "nd"
    assert ndisasm.timeout == 5
