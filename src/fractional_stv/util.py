import csv
import decimal
import numbers

###############################################################
# constants

ZERO = decimal.Decimal(0)

########################
# helper funcs


class CSVLogger:
    def __init__(self, path, header_list):
        self.row_length = len(header_list)
        self.path = path
        self.file = open(path, "w", newline="")
        self.writer = csv.writer(self.file, delimiter=",", quotechar='"', quoting=csv.QUOTE_ALL)
        self.lines_added = None
        self.write(header_list)
        self.lines_added = False

    def write(self, row_list):
        if len(row_list) != self.row_length:
            msg = f"CSVLogger.write ({self.path.name}) row list has length {len(row_list)}, "
            msg += f"doesn't match header list length ({self.row_length})"
            raise RuntimeError(msg)
        self.writer.writerow(row_list)
        self.file.flush()
        if self.lines_added is not None and not self.lines_added:
            self.lines_added = not self.lines_added

    def close(self):
        self.file.flush()
        self.file.close()


def to_decimal(value) -> decimal.Decimal:
    """Convert a ballot weight into a Decimal.

    Floats go through ``str`` so that 2.3 stays 2.3 rather than its binary expansion.
    Booleans and non-numeric strings raise TypeError / decimal.InvalidOperation.
    """
    if isinstance(value, decimal.Decimal):
        return value
    if isinstance(value, bool) or not isinstance(value, (numbers.Number, str)):
        raise TypeError(f"not a number: {value!r}")
    return decimal.Decimal(str(value))


def decimal2float(stat, round_places=3):
    """Convert any decimal objects used internally into float for reporting.

    Args:
        stat (any): Any value.

    Returns:
        any type not Decimal: If the stat passed is type Decimal, it is converted to float.
    """

    if isinstance(stat, decimal.Decimal):
        return round(float(stat), round_places)
    else:
        return stat


def DL2LD(dl):
    return [dict(zip(dl, t)) for t in zip(*dl.values())]
