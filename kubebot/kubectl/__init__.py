"""Merging, checking and guarding of kubectl executor configuration, and event commands."""