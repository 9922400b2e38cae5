"""Keyword-matched canned answers used when no model is available.

Topics are checked in order; the first keyword hit wins.
"""

from libs.common.config import get_settings
from libs.common.currency import format_vnd
from libs.common.gamification import RANK_THRESHOLDS, RankLevel
from libs.common.impact import PLASTIC_GRAMS_PER_CUP

_RANK_ICONS = {
    RankLevel.SEED: "🌱",
    RankLevel.SPROUT: "🌿",
    RankLevel.SAPLING: "🌳",
    RankLevel.TREE: "🌲",
    RankLevel.FOREST: "🌍",
}


def _qr_answer() -> str:
    return (
        "📱 Hướng dẫn quét mã QR:\n\n"
        "**Cách 1: Quét bằng camera**\n"
        '1. Vào trang "Quét QR" trong app\n'
        "2. Cấp quyền truy cập camera\n"
        "3. Đưa camera vào mã QR trên ly, hệ thống sẽ tự nhận diện!\n\n"
        "**Cách 2: Chọn ảnh từ thư viện**\n"
        "Chọn ảnh chứa mã QR, hệ thống sẽ quét mã trong ảnh.\n\n"
        "**Cách 3: Nhập thủ công**\n"
        "Nhập mã 8 số in trên ly rồi xác nhận.\n\n"
        '💡 Mã QR trên ly có dạng "CUP|{8 số}|{loại ly}|SipSmart"'
    )


def _borrow_answer() -> str:
    settings = get_settings()
    return (
        "Để mượn ly SipSmart:\n\n"
        "1. Đến quán đối tác bất kỳ trong hệ thống\n"
        "2. Quét mã QR trên ly\n"
        "3. Xác nhận mượn\n\n"
        f"💰 Tiền cọc: {format_vnd(settings.DEPOSIT_AMOUNT)} (hoàn lại khi trả)\n"
        f"🎁 Ưu đãi: giảm {format_vnd(settings.BORROW_DISCOUNT)} ngay khi mượn!\n\n"
        "Lưu ý: ví cần đủ số dư để đặt cọc. 🌱"
    )


def _return_answer() -> str:
    settings = get_settings()
    return (
        "Để trả ly:\n\n"
        "1. Quét lại mã QR của ly đang mượn\n"
        "2. Chọn quán trả (bất kỳ quán nào trong hệ thống, không cần đúng quán đã mượn)\n"
        "3. Xác nhận trả\n\n"
        f"💡 Trả trong {settings.BORROW_DURATION_HOURS} giờ để nhận "
        f"{settings.POINTS_RETURN_ON_TIME} Green Points thay vì {settings.POINTS_RETURN_LATE}!\n"
        "💰 Tiền cọc được hoàn tự động vào ví của bạn."
    )


def _points_answer() -> str:
    settings = get_settings()
    ranks = "\n".join(
        f"{_RANK_ICONS[rank]} {rank.value.capitalize()} ({threshold:,} điểm)"
        for rank, threshold in RANK_THRESHOLDS.items()
    )
    return (
        "Green Points là điểm thưởng khi bạn sống xanh:\n\n"
        f"✅ Trả ly đúng hạn: +{settings.POINTS_RETURN_ON_TIME} điểm\n"
        f"⚠️ Trả ly quá hạn: +{settings.POINTS_RETURN_LATE} điểm\n\n"
        f"Tích lũy đủ điểm để lên hạng:\n{ranks}\n\n"
        "Càng nhiều điểm, càng nhiều ưu đãi! 🏆"
    )


def _wallet_answer() -> str:
    settings = get_settings()
    return (
        "Ví điện tử của bạn:\n\n"
        '💰 Nạp tiền: vào trang "Ví" và chọn số tiền muốn nạp\n'
        f"💵 Cọc ly: {format_vnd(settings.DEPOSIT_AMOUNT)}/ly (tự động trừ khi mượn)\n"
        "💸 Hoàn cọc: tự động khi trả ly\n"
        f"🎁 Ưu đãi: giảm {format_vnd(settings.BORROW_DISCOUNT)} khi mượn ly"
    )


def _leaderboard_answer() -> str:
    return (
        "Bảng xếp hạng giúp bạn thi đua sống xanh cùng cộng đồng:\n\n"
        "🏆 Xem top người dùng nhiều Green Points nhất\n"
        "📊 So sánh với bạn bè\n"
        "🎯 Thử thách bản thân lên top\n\n"
        'Vào trang "Bảng xếp hạng" để xem ngay!'
    )


def _environment_answer() -> str:
    return (
        "Tác động môi trường của bạn:\n\n"
        f"🌍 Mỗi ly tái sử dụng = giảm {PLASTIC_GRAMS_PER_CUP}g nhựa\n"
        "⏰ Mỗi ly nhựa cần khoảng 450 năm để phân hủy\n"
        "📊 Theo dõi số ly đã cứu trong trang cá nhân\n\n"
        "Cảm ơn bạn đã góp phần bảo vệ hành tinh! 🌱"
    )


def _system_answer() -> str:
    return (
        'Mô hình "Sip Smart" là hệ thống mượn - trả ly tuần hoàn:\n\n'
        "🔄 Ly là tài sản chung, không thuộc về cá nhân hay quán riêng\n"
        "🌐 Trả ly tại bất kỳ quán nào trong hệ thống\n"
        "⚡ Quy trình nhanh gọn với mã QR\n"
        "🎁 Ưu đãi tức thì khi mượn ly\n"
        "📱 Thông báo nhắc nhở trả ly tự động"
    )


DEFAULT_ANSWER = (
    "Tôi có thể giúp bạn về:\n\n"
    '🌱 Cách mượn/trả ly theo mô hình "Sip Smart"\n'
    "💰 Quản lý ví điện tử\n"
    "🏆 Green Points & xếp hạng\n"
    "📊 Tác động môi trường\n"
    "🔄 Nguyên lý hoạt động của hệ thống\n\n"
    "Bạn muốn biết thêm về điều gì?"
)

TOPICS = [
    (("qr", "quét", "scan"), _qr_answer),
    (("mượn", "borrow"), _borrow_answer),
    (("trả", "return"), _return_answer),
    (("điểm", "point", "green"), _points_answer),
    (("ví", "wallet", "tiền"), _wallet_answer),
    (("xếp hạng", "leaderboard", "rank"), _leaderboard_answer),
    (("môi trường", "environment", "nhựa"), _environment_answer),
    (("sip smart", "mô hình", "hệ thống"), _system_answer),
]


def fallback_reply(message: str) -> str:
    lowered = message.lower()
    for keywords, answer in TOPICS:
        if any(keyword in lowered for keyword in keywords):
            return answer()
    return DEFAULT_ANSWER
