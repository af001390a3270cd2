from .meshgen import structured_quad, structured_triangles, meridional_annulus
__all__=['structured_quad','structured_triangles','meridional_annulus']
