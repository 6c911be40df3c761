"""Rollcall - date coordination and attendance tracking API"""
