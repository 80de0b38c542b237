from keepone.core.models import HashMode

HASH_MODE_ALIASES = {
    "md5": HashMode.MD5,
    "sha256": HashMode.SHA256,
    "xxh64": HashMode.XXH64,
    "xxhash": HashMode.XXH64,
}

HASH_MODE_CHOICES = list(HASH_MODE_ALIASES.keys())

HASH_MODE_HELP_TEXT = (
    "Checksum algorithm used to compare file contents:\n"
    "  md5      : MD5\n"
    "  sha256   : SHA-256 (default)\n"
    "  xxh64    : xxHash64 (fastest, non-cryptographic)\n"
)

CHOICE_HELP_TEXT = (
    "  (a) keep all   (n) delete all   (N) keep file N   "
    "(sN) keep file N, link the others to it   (q) quit"
)

EPILOG_TEXT = """
Examples:
  List duplicates in the Downloads folder
  %(prog)s ~/Downloads

  Scan recursively with MD5
  %(prog)s -r -a md5 ~/Downloads

  Decide per duplicate group which file to keep, saving progress on Ctrl+C
  %(prog)s -r -o -s ~/dupes.json ~/Downloads

  Same as above, but only show what would happen
  %(prog)s -r -o -d ~/Downloads

  Continue a previous session without rescanning
  %(prog)s -o -l ~/dupes.json
"""
