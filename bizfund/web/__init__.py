"""Request parsing helpers shared by the routers."""

from .pagination import PaginationParams, extract_pagination, parse_choice, parse_positive_int

__all__ = ["PaginationParams", "extract_pagination", "parse_choice", "parse_positive_int"]
