# Policy evaluation tools for the gap runner
