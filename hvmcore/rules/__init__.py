"""Rewrite rules for applications, duplications, numeric operations and functions."""