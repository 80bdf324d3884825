"""End-to-end tests for the command-line interface"""
import io
import subprocess

import pytest

import main


LISTING = """mov ax,0x13        ; video mode
int 0x10
mov si,0x200
push cx
pop dx
jmp short 0x100
"""


@pytest.fixture
def listing_file(tmp_path):
    path = tmp_path / "life.asm"
    path.write_text(LISTING)
    return path


def test_translates_listing_to_stdout(listing_file, capsys):
    assert main.main([str(listing_file), "--listing"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("package main\n")
    assert "\treg.A().Set(0x13) // mov ax,0x13\n" in out
    assert "\tdos.Interrupt(0x10, state) // int 0x10\n" in out
    assert '\treg.Declare("si") // mov si,0x200\n' in out
    assert "\tstack = append(stack, reg.C().Get()) // push cx\n" in out
    assert "\t// jmp short 0x100\n" in out


def test_minimal_mode_declares_every_register(listing_file, capsys):
    assert main.main([str(listing_file), "--listing", "--minimal"]) == 0
    assert '\treg.Declare("a") // mov ax,0x13\n' in capsys.readouterr().out


def test_python_target_to_file(listing_file, tmp_path, capsys):
    output = tmp_path / "life.py"
    assert main.main([str(listing_file), "--listing", "--target", "python", "-o", str(output)]) == 0
    text = output.read_text()
    assert text.startswith("from interrupts import dos\n")
    assert "    reg.a.set(0x13)  # mov ax,0x13\n" in text
    assert capsys.readouterr().out == ""


def test_listing_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("int 0x20\n"))
    assert main.main(["-"]) == 0
    assert "\tdos.Interrupt(0x20, state) // int 0x20\n" in capsys.readouterr().out


def test_missing_file_exits_non_zero(tmp_path, capsys):
    assert main.main([str(tmp_path / "nope.com")]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Could not find" in captured.err


def test_default_input_name():
    assert main.build_parser().parse_args([]).file == "life.com"


def test_translation_error_exits_non_zero_without_output(tmp_path, capsys):
    path = tmp_path / "bad.asm"
    path.write_text("mov ax,0x1\npush 0x5\nint 0x21\n")
    assert main.main([str(path), "--listing"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "push 0x5" in captured.err


def test_disassembler_failure_exits_non_zero(tmp_path, monkeypatch, capsys):
    binary = tmp_path / "life.com"
    binary.write_bytes(b"\xcd\x20")

    def fake_run(command, **kwargs):
        return subprocess.CompletedProcess(command, 1, stdout="", stderr="boom")

    monkeypatch.setattr(subprocess, "run", fake_run)
    assert main.main([str(binary)]) == 1
    assert "Disassembly" in capsys.readouterr().err


def test_capstone_backend(tmp_path, capsys):
    binary = tmp_path / "life.com"
    binary.write_bytes(b"\xcd\x20")
    assert main.main([str(binary), "--backend", "capstone"]) == 0
    assert "\tdos.Interrupt(0x20, state) // int 0x20\n" in capsys.readouterr().out


def test_unwritable_output_exits_non_zero(listing_file, tmp_path, capsys):
    output = tmp_path / "missing" / "life.go"
    assert main.main([str(listing_file), "--listing", "-o", str(output)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Cannot write output file" in captured.err
