import uuid

from tests.conftest import TEST_EMAIL


def _create_asset(client, headers, **overrides):
    body = {
        'title': 'Golden Hour',
        'description': 'Sunset over the bay',
        'category': 'Photography',
        'price': '0.25',
        'image_url': 'ipfs://bafkimage',
        'metadata': {'metadataUri': 'ipfs://bafkmeta', 'story': {'assetId': '0xasset', 'txHash': '0xtx'}},
    }
    body.update(overrides)
    return client.post('/api/assets', json=body, headers=headers)


def test_create_asset(client, auth_headers):
    response = _create_asset(client, auth_headers)

    assert response.status_code == 201
    asset = response.get_json()
    assert asset['title'] == 'Golden Hour'
    assert asset['price'] == 0.25
    assert asset['image_gateway_url'] == 'https://nftstorage.link/ipfs/bafkimage'
    assert asset['metadata']['story']['assetId'] == '0xasset'
    assert asset['creator']['email'] == TEST_EMAIL


def test_create_asset_requires_token(client):
    response = _create_asset(client, {})

    assert response.status_code == 401


def test_create_asset_requires_title(client, auth_headers):
    response = _create_asset(client, auth_headers, title='')

    assert response.status_code == 400


def test_create_asset_rejects_bad_price(client, auth_headers):
    response = _create_asset(client, auth_headers, price='cheap')

    assert response.status_code == 400


def test_list_assets_newest_first(client, auth_headers):
    _create_asset(client, auth_headers, title='First')
    _create_asset(client, auth_headers, title='Second', image_url='https://picsum.photos/200')

    response = client.get('/api/assets')

    assert response.status_code == 200
    assets = response.get_json()
    assert [a['title'] for a in assets] == ['Second', 'First']
    assert assets[0]['image_gateway_url'] == 'https://picsum.photos/200'


def test_get_asset(client, auth_headers):
    asset_id = _create_asset(client, auth_headers).get_json()['id']

    response = client.get(f'/api/assets/{asset_id}')

    assert response.status_code == 200
    assert response.get_json()['id'] == asset_id


def test_get_missing_asset(client):
    response = client.get(f'/api/assets/{uuid.uuid4()}')

    assert response.status_code == 404
    assert response.get_json()['error'] == 'Asset not found'


def test_get_asset_with_malformed_id(client):
    response = client.get('/api/assets/not-a-uuid')

    assert response.status_code == 404
    assert response.get_json()['error']['code'] == 'NOT_FOUND'


def test_purchase_license(client, auth_headers):
    asset_id = _create_asset(client, auth_headers).get_json()['id']

    response = client.post('/api/licenses/purchase', headers=auth_headers, json={
        'assetId': asset_id,
        'pricePaid': '0.25',
        'transactionHash': '0xpurchase',
        'buyerWallet': '0x9999999999999999999999999999999999999999',
    })

    assert response.status_code == 201
    license = response.get_json()
    assert license['asset_id'] == asset_id
    assert license['price_paid'] == 0.25
    assert license['transaction_hash'] == '0xpurchase'


def test_purchase_license_for_unknown_asset(client, auth_headers):
    response = client.post('/api/licenses/purchase', headers=auth_headers, json={
        'assetId': str(uuid.uuid4()),
        'pricePaid': 1,
    })

    assert response.status_code == 404


def test_purchase_license_requires_token(client):
    response = client.post('/api/licenses/purchase', json={'assetId': str(uuid.uuid4()), 'pricePaid': 1})

    assert response.status_code == 401


def test_purchase_license_validates_input(client, auth_headers):
    assert client.post('/api/licenses/purchase', headers=auth_headers, json={}).status_code == 400
    assert client.post('/api/licenses/purchase', headers=auth_headers,
                       json={'assetId': 'abc', 'pricePaid': 1}).status_code == 400
    assert client.post('/api/licenses/purchase', headers=auth_headers,
                       json={'assetId': str(uuid.uuid4()), 'pricePaid': None}).status_code == 400
