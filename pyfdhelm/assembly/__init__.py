from .face_assembly import (build_face_elements, assemble_residual,
                            assemble_jacobian, total_radiated_power)
__all__=['build_face_elements','assemble_residual','assemble_jacobian','total_radiated_power']
