"""Test package for the prize wheel.

Core tests exercise the resolver, spin engine, settings and lead store
directly. UI smoke tests run pygame headlessly with the SDL dummy video
driver so no real window opens. Run ``pytest`` from the project root.
"""
