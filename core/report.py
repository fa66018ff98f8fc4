from colors import SliceColors as SC


def hex_dump(data: bytes, start: int = 0, width: int = 16, highlight=None) -> str:
    """hexdump -C style listing, offsets relative to the target file.

    `highlight` is an absolute file offset whose byte gets painted.
    """
    lines = []
    for offset in range(0, len(data), width):
        chunk = data[offset:offset + width]
        cells = []
        for i, b in enumerate(chunk):
            cell = f"{b:02x}"
            if highlight is not None and start + offset + i == highlight:
                cell = SC.paint(SC.FLAGGED_BYTE, cell)
            cells.append(cell)
        # pad on the plain width so colour codes don't skew the columns
        left = " ".join(cells[:8]) + " " * (23 - len(" ".join(f"{b:02x}" for b in chunk[:8])))
        right = " ".join(cells[8:]) + " " * (23 - len(" ".join(f"{b:02x}" for b in chunk[8:])))
        text = "".join(chr(b) if 32 <= b <= 126 else "." for b in chunk)
        lines.append(f"{start + offset:08x}  {left}  {right}  |{text}|")
    return "\n".join(lines)


def format_elapsed(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, secs = divmod(seconds, 60)
    return f"{int(minutes)}m{secs:05.2f}s"


def generate_report(result, scanner_name="Scanner"):
    print()
    print("=" * 70)
    print(f"{SC.HEADER}{scanner_name}{SC.RESET} - {format_elapsed(result.elapsed)}")

    if not result.malicious:
        print(SC.paint(SC.for_flag(False), "[+] Not malicious"))
        print("=" * 70 + "\n")
        return

    print(SC.paint(
        SC.for_flag(True),
        f"[!] Isolated bad bytes at offset 0x{result.localized_offset:X} in the file "
        f"[approximately {result.localized_offset} / {result.size} bytes]"
    ))
    print(f"    {SC.DIM}Scans: {result.iterations} | Flagged prefix: {result.upper_bound} bytes{SC.RESET}")
    print("-" * 70)
    print(hex_dump(result.window_dump, start=result.window_start, highlight=result.localized_offset))
    print("-" * 70)

    print(f"\n[!] SIGNATURES: {SC.for_flag(bool(result.signatures))}{len(result.signatures)}{SC.RESET}")
    for signature in result.signatures:
        print(f"    -> {SC.paint(SC.CRITICAL, signature)}")

    print("=" * 70 + "\n")
