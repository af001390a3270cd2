# pyfdhelm/core/settings.py
import os
from dataclasses import dataclass

@dataclass
class FaceSettings:
    """
    Numerical and output conventions shared by all face elements.
    """
    # Default Gauss rule on a face uses poly_order + quad_order_increment points.
    quad_order_increment: int = 2
    # Face Jacobians (and |det J| of bulk elements) at or below this value are degenerate.
    jacobian_tol: float = 1e-14
    # Line written before the records of each face element in a text sink.
    zone_marker: str = "ZONE"
    # Format string used for every number in a text sink record.
    float_format: str = ".16g"

    def format_record(self, values) -> str:
        return " ".join(format(float(v), self.float_format) for v in values)


# Global, editable in one place:
FACE = FaceSettings(
    jacobian_tol=float(os.getenv("PYFDHELM_JACOBIAN_TOL", "1e-14")),
)
