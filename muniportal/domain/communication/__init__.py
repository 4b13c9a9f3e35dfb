"""Communication domain - Review comment threads on applications"""
