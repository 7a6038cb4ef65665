"""Rectangle covering optimizer for fields of marked cells.

Modules:
- data: field context (marks, rectangle weights) and the text input format.
- model: parameters and the Rectangle type.
- shade: slice classification and merge proposals used by local search.
- optimizer: candidate generation, greedy covering, local search, labeling.
- cli: command-line entry point.
"""
