from ygodeck.parsers.ydk import YdkDeckIds, format_ydk, parse_ydk

__all__ = ["YdkDeckIds", "format_ydk", "parse_ydk"]
