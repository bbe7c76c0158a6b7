# seed slices returned when a key has never been written
from typing import List

from wandermart.db.models import Attraction, Order, Post, Product, User


def default_users() -> List[User]:
    return [
        User(
            id="admin1",
            username="Admin User",
            email="admin@test.com",
            role="admin",
            status="active",
        ),
        User(
            id="m1",
            username="Merchant User",
            email="merchant@test.com",
            role="merchant",
            status="active",
            qualification_url="https://picsum.photos/200/300",
        ),
        User(
            id="u1",
            username="Traveler User",
            email="user@test.com",
            role="traveler",
            status="active",
        ),
    ]


def default_attractions() -> List[Attraction]:
    return [
        Attraction(
            id="1",
            title="Chengdu Research Base of Giant Panda Breeding",
            description="A world-renowned breeding and research center for giant pandas.",
            address="1375 Panda Rd, Chenghua District, Chengdu",
            province="四川省",
            city="成都市",
            county="成华区",
            region="四川省 成都市",
            tags=["Nature", "Animals", "Family"],
            image_url="https://picsum.photos/800/600?random=1",
            gallery=[
                "https://picsum.photos/800/600?random=101",
                "https://picsum.photos/800/600?random=102",
                "https://picsum.photos/800/600?random=103",
            ],
            open_hours="07:30 - 18:00",
            driving_tips="Accessible by Metro Line 3. Parking available at South Gate.",
        ),
        Attraction(
            id="2",
            title="The Palace Museum (Forbidden City)",
            description="Imperial palace of the Ming and Qing dynasties. "
            "A masterpiece of Chinese architecture.",
            address="4 Jingshan Front St, Dongcheng District, Beijing",
            province="北京市",
            city="北京市",
            county="东城区",
            region="北京市 东城区",
            tags=["History", "Culture", "Architecture"],
            image_url="https://picsum.photos/800/600?random=2",
            gallery=[
                "https://picsum.photos/800/600?random=201",
                "https://picsum.photos/800/600?random=202",
            ],
            open_hours="08:30 - 17:00",
            driving_tips="No public parking. Use public transport (Metro Line 1).",
        ),
        Attraction(
            id="3",
            title="West Lake Cultural Landscape",
            description="Freshwater lake divided by causeways, "
            "famous for its scenic beauty and temples.",
            address="Xihu District, Hangzhou, Zhejiang",
            province="浙江省",
            city="杭州市",
            county="西湖区",
            region="浙江省 杭州市",
            tags=["Nature", "History", "Water"],
            image_url="https://picsum.photos/800/600?random=3",
            gallery=["https://picsum.photos/800/600?random=301"],
            open_hours="24 Hours",
            driving_tips="Traffic restrictions on weekends based on license plates.",
        ),
        Attraction(
            id="4",
            title="Jiuzhaigou Valley",
            description="Nature reserve and national park known for its many "
            "multi-level waterfalls and colorful lakes.",
            address="Jiuzhaigou County, Ngawa Tibetan and Qiang Autonomous "
            "Prefecture, Sichuan",
            province="四川省",
            city="阿坝藏族羌族自治州",
            county="九寨沟县",
            region="四川省 阿坝州",
            tags=["Nature", "Hiking", "Photography"],
            image_url="https://picsum.photos/800/600?random=4",
            gallery=[
                "https://picsum.photos/800/600?random=401",
                "https://picsum.photos/800/600?random=402",
                "https://picsum.photos/800/600?random=403",
                "https://picsum.photos/800/600?random=404",
            ],
            open_hours="08:00 - 17:00",
            driving_tips="Mountain roads. Careful driving required in winter.",
        ),
        Attraction(
            id="5",
            title="Mount Qingcheng",
            description="One of the birthplaces of Taoism, "
            "featuring lush forests and ancient temples.",
            address="Dujiangyan, Chengdu, Sichuan",
            province="四川省",
            city="成都市",
            county="都江堰市",
            region="四川省 成都市",
            tags=["Culture", "Hiking", "Mountain"],
            image_url="https://picsum.photos/800/600?random=5",
            open_hours="08:00 - 17:30",
            driving_tips="Take Chengguan Expressway. "
            "Parking lot is 2km from gate (shuttle available).",
        ),
    ]


def default_products() -> List[Product]:
    return [
        Product(
            id="p1",
            merchant_id="m1",
            merchant_name="Panda Souvenirs",
            attraction_id="1",
            attraction_name="Chengdu Research Base of Giant Panda Breeding",
            name="Plush Panda Toy",
            description="Soft and cuddly panda plush.",
            price=25.00,
            stock=100,
            image_url="https://picsum.photos/400/400?random=10",
        ),
        Product(
            id="p2",
            merchant_id="m1",
            merchant_name="Panda Souvenirs",
            attraction_id="5",
            attraction_name="Mount Qingcheng",
            name="Bamboo Fan",
            description="Traditional hand fan made of bamboo.",
            price=12.50,
            stock=50,
            image_url="https://picsum.photos/400/400?random=11",
        ),
    ]


def default_posts() -> List[Post]:
    return []


def default_orders() -> List[Order]:
    return []
