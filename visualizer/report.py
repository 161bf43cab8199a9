from typing import List, Optional, Sequence, TextIO
from colorama import Fore, Style, init
import sys

from catalog_analyzer.graph import GraphStats
from catalog_analyzer.planner import CheckStatus, CourseDetails, PrerequisiteCheck
from catalog_analyzer.record import Record
from catalog_analyzer.validation import ValidationReport

LINE_WIDTH = 78

MENU_ITEMS = [
    ("1", "Import Course Data", "Load course information from a file"),
    ("2", "Display All Courses", "View complete course catalog"),
    ("3", "Search Course Details", "Find specific course information"),
    ("4", "View Prerequisite Path", "See required course sequence"),
    ("5", "Check Prerequisites", "Validate prerequisite requirements"),
    ("9", "Exit Program", "Close the application"),
]


class ReportRenderer:
    """Renders catalog query results as console text."""

    def __init__(self, stream: Optional[TextIO] = None, color: bool = True):
        """Initialize the renderer.

        Args:
            stream: Where output is written. Defaults to sys.stdout at write time.
            color: Emit ANSI colours. Disable for files, pipes and tests.
        """
        if color:
            init()  # Initialize colorama
        self._stream = stream
        self.color = color

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _paint(self, text: str, color: str) -> str:
        if not self.color:
            return text
        return f"{color}{text}{Style.RESET_ALL}"

    def _write(self, *lines: str):
        for line in lines:
            self.stream.write(line + "\n")
        self.stream.flush()

    # --- Framing ---

    def line(self, symbol: str = "="):
        self._write("  " + symbol * LINE_WIDTH)

    def sub_header(self, text: str):
        self._write("", "  " + self._paint(text, Fore.CYAN), "  " + "-" * 58)

    def success(self, message: str):
        self._write("", "  " + self._paint(f"[SUCCESS] {message}", Fore.GREEN), "")

    def warning(self, message: str):
        self._write("", "  " + self._paint(f"[WARNING] {message}", Fore.YELLOW), "")

    def error(self, message: str):
        self._write("", "  " + self._paint(f"[ERROR] {message}", Fore.RED), "")

    def menu(self):
        self.line()
        self._write("", "MAIN MENU".center(LINE_WIDTH + 4).rstrip(), "")
        self.line("-")
        for number, label, description in MENU_ITEMS:
            self._write(f"    {number}. {label:<27}- {description}")
        self.line("-")

    def farewell(self):
        self._write("", "    Thank you for using the Course Management System!", "")
        self.line()

    # --- Views ---

    def catalog(self, records: Sequence[Record]):
        """Print the whole catalog as a key-ordered table."""
        self.sub_header("Complete Course Catalog")
        self._write("    COURSE ID  | COURSE TITLE", "  " + "-" * 73)
        if not records:
            self._write("    No courses available.")
            return
        for record in records:
            self._write(f"    {record.key:<10} | {record.title}")
        self._write("", "    End of course catalog.", "")
        self.line()

    def course_details(self, details: CourseDetails):
        record = details.record
        self.sub_header("Course Details")
        self._write(f"    Course ID:   {record.key}", f"    Title:       {record.title}", "    Prerequisites:")
        if not details.prerequisites:
            self._write("        None")
        for prereq in details.prerequisites:
            suffix = self._paint(" (not in catalog)", Fore.YELLOW) if prereq in details.missing else ""
            self._write(f"        - {prereq}{suffix}")
        self._write("    Required by:")
        if not details.dependents:
            self._write("        None")
        for dependent in details.dependents:
            self._write(f"        - {dependent}")
        self._write("")
        self.line()

    def prerequisite_path(self, key: str, order: Sequence[Record]):
        self._write("", f"    Prerequisite Sequence for {key}:", "    " + "-" * 50)
        if not order:
            self._write("    No prerequisites required")
        for i, record in enumerate(order, start=1):
            self._write(f"        {i}. {record.key:<9}| {record.title}")
        self._write("")

    def prerequisite_check(self, check: PrerequisiteCheck):
        record = check.record
        self._write("", f"    Validating prerequisites for {record.key}...")
        if check.status is CheckStatus.ENTRY_LEVEL:
            self.success("No prerequisites required - Entry level course")
        elif check.status is CheckStatus.CIRCULAR:
            self.warning("Invalid prerequisite structure detected!")
            self._write("        This course has a circular prerequisite dependency.")
            if check.cycle:
                self._write(f"        Cycle: {' -> '.join(check.cycle)}")
            self._write("")
        else:
            self.success("Valid prerequisite structure")
            self._write(f"        Prerequisites: {', '.join(record.prerequisites)}", "")

    def validation(self, report: ValidationReport):
        self.sub_header("Prerequisite Validation")
        if report.ok:
            self.success("All prerequisites are valid")
            return
        for key, violations in sorted(report.by_key().items()):
            self._write(f"    {key}")
            for violation in violations:
                self._write("        - " + self._paint(violation.message, Fore.YELLOW))
        self.warning(f"{len(report)} problem(s) found")

    def catalog_order(self, order: Sequence[Record]):
        self.sub_header("Suggested Study Order")
        for i, record in enumerate(order, start=1):
            self._write(f"    {i:>3}. {record.key:<9}| {record.title}")
        self._write("")

    def cycle_groups(self, groups: List[List[str]]):
        for i, group in enumerate(groups, start=1):
            self._write(f"    Cycle group {i}: {', '.join(group)}")

    def stats(self, stats: GraphStats):
        self.sub_header("Catalog Summary")
        self._write(
            f"    - Total courses          : {stats.records}",
            f"    - Prerequisite edges     : {stats.edges}",
            f"    - Dangling references    : {stats.dangling}",
            f"    - Avg in/out degree      : {stats.avg_in_degree:.2f} / {stats.avg_out_degree:.2f}",
            f"    - Max in/out degree      : {stats.max_in_degree} / {stats.max_out_degree}",
            f"    - Entry-level courses    : {stats.roots}",
            f"    - Not required by others : {stats.leaves}",
            "",
        )
