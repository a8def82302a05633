RESET = "\x1b[0m"
BOLD = "\x1b[1m"
DIM = "\x1b[2m"
RED = "\x1b[31m"
GREEN = "\x1b[32m"
YELLOW = "\x1b[33m"
BLUE = "\x1b[34m"
MAGENTA = "\x1b[35m"
CYAN = "\x1b[36m"

def C256(n: int) -> str:
    return f"\x1b[38;5;{n}m"

ORANGE = C256(208)
GRAY   = C256(245)
WHITE  = C256(255)
