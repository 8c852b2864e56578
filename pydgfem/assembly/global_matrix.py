"""pydgfem.assembly.global_matrix"""
import numpy as np, scipy.sparse as sp


class SparseAccumulator:
    """Additive COO-style accumulator; duplicate entries are summed on conversion."""

    def __init__(self, n_rows: int, n_cols: int = None):
        self.shape = (int(n_rows), int(n_rows if n_cols is None else n_cols))
        self.rows, self.cols, self.data = [], [], []

    def add(self, rows, cols, block):
        rows = np.asarray(rows, dtype=int)
        cols = np.asarray(cols, dtype=int)
        block = np.asarray(block, dtype=float)
        if block.shape != (rows.size, cols.size):
            raise ValueError(f"Block of shape {block.shape} does not match "
                             f"{rows.size} rows x {cols.size} cols.")
        rr, cc = np.meshgrid(rows, cols, indexing='ij')
        self.rows.extend(rr.ravel())
        self.cols.extend(cc.ravel())
        self.data.extend(block.ravel())

    def clear(self):
        self.rows, self.cols, self.data = [], [], []

    def __len__(self):
        return len(self.data)

    def tocsr(self) -> sp.csr_matrix:
        return sp.csr_matrix((self.data, (self.rows, self.cols)), shape=self.shape)

    def toarray(self) -> np.ndarray:
        return self.tocsr().toarray()
