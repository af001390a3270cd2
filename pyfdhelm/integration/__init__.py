from .quadrature import IntegrationRule, gauss_legendre, gauss_line, volume, edge
__all__ = ['IntegrationRule', 'gauss_legendre', 'gauss_line', 'volume', 'edge']
