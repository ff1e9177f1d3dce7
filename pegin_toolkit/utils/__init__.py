from pegin_toolkit.utils.address import address_to_output_script, get_script_hash

__all__ = [
    "address_to_output_script",
    "get_script_hash",
]
