import abi
import ec
import keys
import signer
import utils

# --- Configuration Section ---
chain_id = 31337  # Chain ID of the local development node (Hardhat/Anvil default).
url = 'http://localhost:8546'  # RPC endpoint of the node.
contract_address = '0x5FbDB2315678afecb367f032d93F642f64180aa3'  # A deployed contract exposing store(uint256)/retrieve().
contract_json_file = './artifacts/Storage.json'  # Compiled artifact of that contract, its 'abi' entry is used.
# First default development account of Hardhat/Anvil. Never use it on a public network.
private_key = '0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80'
nonce = 6  # Nonce management is left to the caller, update as needed.

# --- Key and Client Initialization ---
account = keys.Keys(private_key)
client = ec.Client(url)
contract_abi = utils.read_contract_json(contract_json_file)['abi']

# --- store(uint256) ---
store_signature = abi.function_signature(contract_abi, 'store')
store_data = abi.encode_function_call(store_signature, ['uint256'], [11111])
# No fee caps and no access list, so this is signed as a legacy transaction.
tx = {
    'to': contract_address,
    'value': 0,
    'data': store_data,
    'gas': 100000,
    'gasPrice': 1000000000,
    'nonce': nonce,
    'chainId': chain_id,
}
raw_tx = signer.sign_tx(tx, private_key)
receipt = client.send_raw_transaction(raw_tx, wait=True)
print(store_signature, 'status:', receipt['status'])

# --- retrieve() ---
retrieve_signature = abi.function_signature(contract_abi, 'retrieve')
retrieve_data = abi.encode_function_call(retrieve_signature, [], [])
result = client.call(contract_address, retrieve_data, from_address=account.address)
print(retrieve_signature, 'value:', int(result, 16))
