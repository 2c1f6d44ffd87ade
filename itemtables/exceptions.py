"""
Custom exceptions for item table conversion
"""


class ItemTablesError(Exception):
    """Base exception for conversion errors"""
    pass


class UsageError(ItemTablesError):
    """Raised when the command line is missing required input"""
    pass


class OpenError(ItemTablesError):
    """Raised when the input file cannot be opened"""
    pass


class MissingColumnError(ItemTablesError):
    """Raised when a required column is absent from the header"""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(
            "could not find required columns ({}) in the CSV".format(", ".join(self.missing))
        )


class MalformedRowError(ItemTablesError):
    """Raised when the csv parser cannot read a data row"""

    def __init__(self, line, reason):
        self.line = line
        super().__init__(f"error reading row at line {line}: {reason}")


class DirectoryCreationError(ItemTablesError):
    """Raised when the output directory cannot be created"""
    pass


class AggregateWriteError(ItemTablesError):
    """Raised when allitems.json cannot be written"""
    pass


class CategoryWriteError(ItemTablesError):
    """Raised when a single category file cannot be written"""

    def __init__(self, category, path, reason):
        self.category = category
        self.path = path
        super().__init__(f"error saving category {category} to {path}: {reason}")
