"""Taxes domain - Municipal tax return calculators"""
