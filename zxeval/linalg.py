"""
Matrices and linear algebra over GF(2).

`Mat2` stores its bits in a numpy uint8 array; row and column additions are
XORs. Elimination follows the blocked scheme of

    K. Patel, I. Markov, J. Hayes. Optimal Synthesis of Linear Reversible
    Circuits. QIC 2008

and can mirror every elementary operation it performs onto caller-supplied
`RowColOps` objects, which is how inverses (and, elsewhere, CNOT circuits)
are accumulated.
"""

import abc
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .log import get_logger
logger = get_logger(__name__)

DEFAULT_BLOCKSIZE = 3


class RowColOps(abc.ABC):
    """Anything that can follow the elementary operations of an elimination."""

    @abc.abstractmethod
    def row_add(self, r0: int, r1: int):
        """Add r0 to r1"""

    @abc.abstractmethod
    def col_add(self, c0: int, c1: int):
        """Add c0 to c1"""

    @abc.abstractmethod
    def row_swap(self, r0: int, r1: int):
        """Swap r0 and r1"""

    @abc.abstractmethod
    def col_swap(self, c0: int, c1: int):
        """Swap c0 and c1"""


class NoOps(RowColOps):
    """Ignores every operation. Default recorder for `Mat2.gauss`."""

    def row_add(self, r0, r1):
        pass

    def col_add(self, c0, c1):
        pass

    def row_swap(self, r0, r1):
        pass

    def col_swap(self, c0, c1):
        pass


class OpRecorder(RowColOps):
    """Keeps the sequence of operations as ``(name, a, b)`` tuples.

    A recorded row_add(r0, r1) is a CNOT with control r0 and target r1, so the
    log of a row-reduction of a parity matrix is a CNOT circuit for it.
    """

    def __init__(self):
        self.ops: List[Tuple[str, int, int]] = []

    def row_add(self, r0, r1):
        self.ops.append(("row_add", r0, r1))

    def col_add(self, c0, c1):
        self.ops.append(("col_add", c0, c1))

    def row_swap(self, r0, r1):
        self.ops.append(("row_swap", r0, r1))

    def col_swap(self, c0, c1):
        self.ops.append(("col_swap", c0, c1))

    def replay(self, target: RowColOps):
        for name, a, b in self.ops:
            getattr(target, name)(a, b)

    def __len__(self):
        return len(self.ops)


class Mat2(RowColOps):
    """A matrix over GF(2)."""

    def __init__(self, data):
        d = np.array(data, dtype=np.uint8)
        if d.ndim == 1 and d.size == 0:
            d = d.reshape(0, 0)
        if d.ndim != 2:
            raise ValueError(f"Mat2 expects a 2-dimensional array of bits, got shape {d.shape}")
        self.d: np.ndarray = d % 2

    @classmethod
    def build(cls, rows: int, cols: int, f: Callable[[int, int], bool]) -> "Mat2":
        """Build a rows x cols matrix with a 1 wherever f(i, j) is true."""
        d = np.zeros((rows, cols), dtype=np.uint8)
        for i in range(rows):
            for j in range(cols):
                if f(i, j):
                    d[i, j] = 1
        return cls(d)

    @classmethod
    def zeros(cls, rows: int, cols: int) -> "Mat2":
        return cls(np.zeros((rows, cols), dtype=np.uint8))

    @classmethod
    def ones(cls, rows: int, cols: int) -> "Mat2":
        return cls(np.ones((rows, cols), dtype=np.uint8))

    @classmethod
    def id(cls, dim: int) -> "Mat2":
        return cls(np.eye(dim, dtype=np.uint8))

    @classmethod
    def unit_vector(cls, dim: int, i: int) -> "Mat2":
        """A column vector with a single 1 at index i."""
        return cls.build(dim, 1, lambda x, _: x == i)

    def num_rows(self) -> int:
        return self.d.shape[0]

    def num_cols(self) -> int:
        return self.d.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.d.shape

    def copy(self) -> "Mat2":
        return Mat2(self.d.copy())

    def transpose(self) -> "Mat2":
        return Mat2(self.d.T.copy())

    def to_list(self) -> List[List[int]]:
        return self.d.astype(int).tolist()

    # elementary operations, in place
    def row_add(self, r0, r1):
        self.d[r1] ^= self.d[r0]

    def col_add(self, c0, c1):
        self.d[:, c1] ^= self.d[:, c0]

    def row_swap(self, r0, r1):
        self.d[[r0, r1]] = self.d[[r1, r0]]

    def col_swap(self, c0, c1):
        self.d[:, [c0, c1]] = self.d[:, [c1, c0]]

    def _dedupe_block(self, rows: Sequence[int], i0: int, i1: int, x: RowColOps, y: RowColOps):
        # rows whose restriction to columns [i0, i1) repeat an earlier row get
        # that row added to them, zeroing the block
        chunks = {}
        for r in rows:
            ch = self.d[r, i0:i1]
            if not ch.any():
                continue
            key = ch.tobytes()
            r1 = chunks.get(key)
            if r1 is not None:
                self.row_add(r1, r)
                x.row_add(r1, r)
                y.col_add(r, r1)
            else:
                chunks[key] = r

    def gauss(
        self,
        full_reduce: bool = False,
        blocksize: int = DEFAULT_BLOCKSIZE,
        x: Optional[RowColOps] = None,
        y: Optional[RowColOps] = None,
        pivot_cols: Optional[List[int]] = None,
    ) -> int:
        """Compute the (row-reduced) echelon form in place.

        Returns the number of non-zero rows in the result, i.e. the rank of
        the matrix.

        Args:
            full_reduce (bool): Compute the fully reduced row-echelon form,
                as needed for inversion and CNOT synthesis.
            blocksize (int): Width of the column blocks used for duplicate-row
                elimination. With blocksize equal to the number of columns this
                is just removing duplicate rows before plain Gaussian elimination.
            x (RowColOps): Receives every row operation. If the elimination
                computes g * m = m', then x --> g * x.
            y (RowColOps): Receives every row operation as the inverse column
                operation, so y --> y * g^-1.
            pivot_cols (list): Filled with the pivot columns, left to right.
        """
        if blocksize < 1:
            raise ValueError(f"blocksize must be positive, got {blocksize}")
        x = NoOps() if x is None else x
        y = NoOps() if y is None else y
        pivot_cols = [] if pivot_cols is None else pivot_cols

        rows, cols = self.d.shape
        pivot_row = 0
        num_blocks = -(-cols // blocksize)

        for sec in range(num_blocks):
            i0 = sec * blocksize
            i1 = min(cols, (sec + 1) * blocksize)

            self._dedupe_block(range(pivot_row, rows), i0, i1, x, y)

            for p in range(i0, i1):
                for r0 in range(pivot_row, rows):
                    if self.d[r0, p]:
                        if r0 != pivot_row:
                            self.row_add(r0, pivot_row)
                            x.row_add(r0, pivot_row)
                            y.col_add(pivot_row, r0)

                        for r1 in range(pivot_row + 1, rows):
                            if self.d[r1, p]:
                                self.row_add(pivot_row, r1)
                                x.row_add(pivot_row, r1)
                                y.col_add(r1, pivot_row)
                        pivot_cols.append(p)
                        pivot_row += 1
                        break

        rank = pivot_row

        if full_reduce and rank > 0:
            pivot_row -= 1
            remaining = list(pivot_cols)

            for sec in range(num_blocks - 1, -1, -1):
                i0 = sec * blocksize
                i1 = min(cols, (sec + 1) * blocksize)

                self._dedupe_block(range(pivot_row, -1, -1), i0, i1, x, y)

                while remaining and i0 <= remaining[-1] < i1:
                    pcol = remaining.pop()
                    for r in range(pivot_row):
                        if self.d[r, pcol]:
                            self.row_add(pivot_row, r)
                            x.row_add(pivot_row, r)
                            y.col_add(r, pivot_row)
                    pivot_row -= 1

        logger.debug(f"gauss on {rows}x{cols} matrix: {num_blocks} blocks, rank={rank}, full_reduce={full_reduce}")
        return rank

    def gauss_aux(self, full_reduce: bool, blocksize: int, x: RowColOps) -> int:
        return self.gauss(full_reduce=full_reduce, blocksize=blocksize, x=x)

    def rank(self) -> int:
        m = self.copy()
        return m.gauss(full_reduce=False)

    def inverse(self) -> Optional["Mat2"]:
        """The inverse matrix, or None if the matrix is not square or singular."""
        if self.num_rows() != self.num_cols():
            return None

        m = self.copy()
        inv = Mat2.id(self.num_rows())
        rank = m.gauss(full_reduce=True, x=inv)
        if rank < self.num_rows():
            return None
        return inv

    def __mul__(self, other: "Mat2") -> "Mat2":
        if not isinstance(other, Mat2):
            return NotImplemented
        if self.num_cols() != other.num_rows():
            raise ValueError(
                f"Cannot multiply matrices with mismatched dimensions: "
                f"{self.num_rows()}x{self.num_cols()} * {other.num_rows()}x{other.num_cols()}"
            )
        prod = self.d.astype(np.int64) @ other.d.astype(np.int64)
        return Mat2(prod % 2)

    __matmul__ = __mul__

    def __eq__(self, other):
        if not isinstance(other, Mat2):
            return NotImplemented
        return self.d.shape == other.d.shape and bool(np.array_equal(self.d, other.d))

    __hash__ = None

    def __getitem__(self, idx):
        if isinstance(idx, tuple):
            return int(self.d[idx])
        return self.d[idx]

    def __setitem__(self, idx, value):
        self.d[idx] = np.asarray(value, dtype=np.uint8) % 2

    def __str__(self):
        return "".join("[ " + "".join(f"{b} " for b in row) + "]\n" for row in self.d.tolist())

    def __repr__(self):
        return f"Mat2({self.to_list()})"
