"""
变异性模型 - 存在条件（布尔公式）与注解树操作

``presence``: parsing, rendering and evaluation of presence conditions.
``tree``: well-formedness checks, tree building and queries over annotation trees.
"""
