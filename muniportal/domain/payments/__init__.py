"""Payments domain - Money conversion and service fee quotes"""
