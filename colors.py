# threatslice - Color Palette

from colorama import Back, Fore, Style, init

from core.verdict import VerdictStatus

init(autoreset=True)


class SliceColors:

    HEADER = Fore.MAGENTA + Style.BRIGHT

    CRITICAL = Fore.RED + Style.BRIGHT
    WARNING = Fore.YELLOW + Style.BRIGHT
    SUCCESS = Fore.GREEN + Style.BRIGHT
    INFO = Fore.CYAN
    DIM = Style.DIM
    RESET = Style.RESET_ALL

    # Byte whose inclusion flips the prefix from clean to flagged
    FLAGGED_BYTE = Back.RED + Fore.WHITE + Style.BRIGHT

    VERDICT = {
        VerdictStatus.MALICIOUS: CRITICAL,
        VerdictStatus.CLEAN: SUCCESS,
        VerdictStatus.INCONCLUSIVE: WARNING,
    }

    @classmethod
    def for_verdict(cls, status):
        return cls.VERDICT.get(status, cls.INFO)

    @classmethod
    def for_flag(cls, malicious: bool):
        return cls.for_verdict(VerdictStatus.MALICIOUS if malicious else VerdictStatus.CLEAN)

    @classmethod
    def paint(cls, color, text):
        return f"{color}{text}{cls.RESET}"
