"""Workflow domain - Status vocabularies, transitions and reviewer assignment for every application type"""
