"""File classification configuration.

These settings control how files are bucketed by size and tagged by content
type before any content is read. The size tier decides how much of a file is
loaded and whether it gets chunked; the content type decides whether it can be
read at all.
"""

# =============================================================================
# Size Tiers
# =============================================================================
# Files up to SMALL_FILE_SIZE_BYTES are read in full and sent verbatim. Files
# up to MEDIUM_FILE_SIZE_BYTES are read in full and also get a summary line.
# Anything larger is read, summarized and split into chunks. MAX_FILE_SIZE_BYTES
# caps what is read at all; bigger files are classified but left unread.

SMALL_FILE_SIZE_BYTES = 10 * 1024
MEDIUM_FILE_SIZE_BYTES = 100 * 1024
MAX_FILE_SIZE_BYTES = 1024 * 1024

# =============================================================================
# Content Sniffing
# =============================================================================
# Files whose extension is not in any table below are sniffed: the first
# SNIFF_BYTES are read and the file counts as text when they decode as UTF-8
# and at least TEXT_RATIO of the bytes are printable ASCII or whitespace.

SNIFF_BYTES = 512
TEXT_RATIO = 0.9

# =============================================================================
# Extension Tables
# =============================================================================
# Checked in order: text, binary, archive, image, then the two specialized
# readable formats (paginated documents and network captures).

TEXT_EXTENSIONS = frozenset([
    ".txt", ".md", ".go", ".py", ".js", ".ts", ".java", ".c", ".cpp", ".h",
    ".rs", ".rb", ".php", ".sh", ".bash", ".zsh", ".yaml", ".yml", ".json",
    ".xml", ".html", ".css", ".sql", ".r", ".swift", ".kt", ".scala",
])

BINARY_EXTENSIONS = frozenset([".exe", ".dll", ".so", ".dylib", ".bin", ".o", ".a"])

ARCHIVE_EXTENSIONS = frozenset([".zip", ".tar", ".gz", ".bz2", ".xz", ".7z", ".rar"])

IMAGE_EXTENSIONS = frozenset([
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg", ".ico", ".webp",
])

DOCUMENT_EXTENSIONS = frozenset([".pdf"])

CAPTURE_EXTENSIONS = frozenset([".pcap", ".pcapng", ".cap"])

# =============================================================================
# Languages
# =============================================================================
# Human-readable language names for summaries, and the identifiers used on
# fenced code blocks in rendered payloads.

EXTENSION_LANGUAGES = {
    ".go": "Go",
    ".py": "Python",
    ".js": "JavaScript",
    ".ts": "TypeScript",
    ".java": "Java",
    ".c": "C",
    ".cpp": "C++",
    ".h": "C/C++ Header",
    ".rs": "Rust",
    ".rb": "Ruby",
    ".php": "PHP",
    ".swift": "Swift",
    ".kt": "Kotlin",
    ".scala": "Scala",
    ".sh": "Shell",
    ".sql": "SQL",
    ".pcap": "Network Capture",
    ".pcapng": "Network Capture",
    ".cap": "Network Capture",
}

FENCE_LANGUAGES = {
    ".go": "go",
    ".py": "python",
    ".js": "javascript",
    ".ts": "typescript",
    ".java": "java",
    ".c": "c",
    ".cpp": "cpp",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".sh": "bash",
    ".sql": "sql",
    ".md": "markdown",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".xml": "xml",
    ".pcap": "text",
    ".pcapng": "text",
    ".cap": "text",
}

# =============================================================================
# Concurrency
# =============================================================================
# Number of files analyzed (read, chunked, scanned) at the same time, and the
# default number of backend requests in flight during dispatch.

CONCURRENT_FILES = 10

# =============================================================================
# Directory Walk
# =============================================================================

MAX_DEPTH = 20
IGNORE_FILE = ".agentignore"

# =============================================================================
# Network Captures
# =============================================================================
# Capture files are rendered as a text summary rather than raw packets. Only
# the first CAPTURE_MAX_PACKETS packets are counted, and each "top" table
# lists CAPTURE_TOP_N entries.

CAPTURE_MAX_PACKETS = 100_000
CAPTURE_TOP_N = 5
