import struct
from pathlib import Path

CONTROL_TEMPLATE = """Source: foobar
Section: libs
Priority: optional
Maintainer: Jane Doe <jane.doe@example.com>
Build-Depends: {build_depends}

Package: libfoobar1
Architecture: any
Description: foobar library
 The foobar library.
{extra_packages}"""

CHANGELOG_TEMPLATE = """foobar ({version}) unstable; urgency=medium

  * Did something!

 -- Jane Doe <jane.doe@example.com>  Mon, 01 Jan 2024 12:00:00 +0000
"""

OBJDUMP_TEMPLATE = """
{path}:     file format elf64-x86-64

Program Header:
    LOAD off    0x0000000000000000 vaddr 0x0000000000000000 paddr 0x0000000000000000 align 2**12
         filesz 0x0000000000000518 memsz 0x0000000000000518 flags r--

Dynamic Section:
  NEEDED               libc.so.6
{soname_line}  INIT                 0x0000000000001000
  FINI                 0x0000000000001104

Version References:
  required from libc.so.6:
    0x09691a75 0x00 02 GLIBC_2.2.5

"""

ET_EXEC = 2
ET_DYN = 3
EM_X86_64 = 62


def objdump_output(soname=None, path="libfoo.so"):
    soname_line = f"  SONAME               {soname}\n" if soname else ""
    return OBJDUMP_TEMPLATE.format(path=path, soname_line=soname_line)


def elf_header(e_type=ET_DYN) -> bytes:
    """Minimal little endian ELF64 file with a single null section header."""
    e_ident = b"\x7fELF" + bytes((2, 1, 1, 0)) + bytes(8)
    header = e_ident + struct.pack(
        "<HHIQQQIHHHHHH",
        e_type,
        EM_X86_64,
        1,  # e_version
        0,  # e_entry
        0,  # e_phoff
        64,  # e_shoff
        0,  # e_flags
        64,  # e_ehsize
        56,  # e_phentsize
        0,  # e_phnum
        64,  # e_shentsize
        1,  # e_shnum
        0,  # e_shstrndx
    )
    return header + bytes(64)


def write_elf(path: Path, e_type=ET_DYN) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(elf_header(e_type))
    return path
