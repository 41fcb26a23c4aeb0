class RuleEngine:
    """
    Applies a collection of rules to a flat list of AST nodes
    and collects their diagnostics.
    """

    def __init__(self, rules):
        self.rules = rules

    def run(self, nodes, source):
        diagnostics = []

        for node in nodes:
            for rule in self.rules:
                # Check if the rule applies to this node
                if rule.matches(node):
                    result = rule.apply(node, source)

                    # Only keep meaningful output
                    if result:
                        diagnostics.append(result)

        for rule in self.rules:
            if hasattr(rule, "finalize"):
                diagnostics.extend(rule.finalize() or [])

        return [
            diag for _, diag in sorted(
                enumerate(diagnostics),
                key=lambda pair: (pair[1]["span"].start, pair[0]),
            )
        ]
